from __future__ import annotations

import ipaddress
from dataclasses import dataclass

from wifidist.errors import ConfigurationError
from wifidist.point import Point

AP_ROLE = "ap"
STA_ROLE = "sta"


@dataclass(frozen=True)
class NodeSpec:
    node_id: int
    role: str
    position: Point
    address: ipaddress.IPv4Address


@dataclass(frozen=True)
class Endpoint:
    address: ipaddress.IPv4Address
    port: int

    def __str__(self):
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class TopologySpec:
    ap: NodeSpec
    stations: tuple
    ssid: str
    subnet: ipaddress.IPv4Network

    @property
    def nodes(self):
        return (self.ap,) + self.stations


@dataclass(frozen=True)
class SinkApp:
    node_id: int
    endpoint: Endpoint
    start: float
    stop: float


@dataclass(frozen=True)
class BulkFlow:
    """ Unlimited upload from one station to the sink when max_bytes is 0. """
    source: int
    destination: Endpoint
    start: float
    stop: float
    send_size: int
    max_bytes: int = 0


@dataclass(frozen=True)
class TrafficPlan:
    sink: SinkApp
    flows: tuple


def station_offsets(count, k):
    """
    Lateral offsets 0, +k, -k, +2k, -2k, ... so that no two stations of the
    cluster share a position, whatever the cluster's distance from the AP.
    """
    if k <= 0:
        raise ConfigurationError(f"station offset must be positive, got {k}")
    offsets = []
    for i in range(count):
        step = (i + 1) // 2
        offsets.append(step * k if i % 2 else -step * k)
    return [o + 0.0 for o in offsets]  # normalises -0.0


class Configurator:
    def __init__(self, conf):
        self.conf = conf

    def _address_pool(self):
        try:
            subnet = ipaddress.ip_network(self.conf.SUBNET)
        except ValueError as e:
            raise ConfigurationError(f"Invalid subnet {self.conf.SUBNET!r}: {e}") from e
        return subnet, subnet.hosts()

    def build_topology(self, scenario) -> TopologySpec:
        subnet, hosts = self._address_pool()
        # one address per interface, AP first
        needed = scenario.station_count + 1
        addresses = []
        for _ in range(needed):
            try:
                addresses.append(next(hosts))
            except StopIteration:
                raise ConfigurationError(
                    f"Subnet {subnet} cannot address {needed} interfaces", scenario.distance
                ) from None

        ap = NodeSpec(0, AP_ROLE, Point(0.0, 0.0, 0.0), addresses[0])
        stations = tuple(
            NodeSpec(i + 1, STA_ROLE, Point(scenario.distance, offset, 0.0), addresses[i + 1])
            for i, offset in enumerate(station_offsets(scenario.station_count, self.conf.STATION_OFFSET))
        )
        return TopologySpec(ap=ap, stations=stations, ssid=self.conf.SSID, subnet=subnet)

    def build_traffic_plan(self, scenario, topology) -> TrafficPlan:
        endpoint = Endpoint(topology.ap.address, self.conf.SINK_PORT)
        sink = SinkApp(topology.ap.node_id, endpoint, scenario.app_start, scenario.app_stop)
        flows = tuple(
            BulkFlow(
                source=sta.node_id,
                destination=endpoint,
                start=scenario.app_start + self.conf.START_STAGGER * i,  # small staggers
                stop=scenario.app_stop,
                send_size=self.conf.SEND_SIZE,
            )
            for i, sta in enumerate(topology.stations)
        )
        return TrafficPlan(sink=sink, flows=flows)

    def configure(self, scenario):
        topology = self.build_topology(scenario)
        return topology, self.build_traffic_plan(scenario, topology)
