from __future__ import annotations

import math
from dataclasses import dataclass

from wifidist.errors import EngineFailure


@dataclass(frozen=True)
class FlowRecord:
    """ Counters the engine keeps for one tracked flow. delay_sum is in seconds. """
    tx_packets: int
    rx_packets: int
    lost_packets: int
    delay_sum: float


@dataclass(frozen=True)
class ScenarioResult:
    distance: float
    throughput_mbps: float
    avg_delay_ms: float
    loss_percent: float

    def as_row(self):
        return [self.distance, self.throughput_mbps, self.avg_delay_ms, self.loss_percent]


def _check_record(flow_id, record, distance):
    if not isinstance(record, FlowRecord):
        raise EngineFailure(f"Flow {flow_id}: expected a FlowRecord, got {type(record).__name__}", distance)
    for name in ("tx_packets", "rx_packets", "lost_packets"):
        value = getattr(record, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise EngineFailure(f"Flow {flow_id}: {name} must be a non-negative integer, got {value!r}", distance)
    delay = record.delay_sum
    if isinstance(delay, bool) or not isinstance(delay, (int, float)) or not math.isfinite(delay) or delay < 0:
        raise EngineFailure(f"Flow {flow_id}: invalid delay_sum {record.delay_sum!r}", distance)
    if record.lost_packets > record.tx_packets or record.rx_packets > record.tx_packets:
        raise EngineFailure(
            f"Flow {flow_id}: inconsistent counters tx={record.tx_packets} "
            f"rx={record.rx_packets} lost={record.lost_packets}",
            distance,
        )


def aggregate(received_bytes, flow_records, scenario) -> ScenarioResult:
    """
    Reduce the engine's raw counters for one scenario to its result row.

    received_bytes: application bytes the AP sink received
    flow_records: mapping of flow id -> FlowRecord for every tracked flow
    scenario: the Scenario that was run, for its distance and app timing

    Zero received or transmitted packets yield zero delay or loss. A missing
    or malformed record set is an EngineFailure.
    """
    distance = scenario.distance
    if flow_records is None:
        raise EngineFailure("Engine reported no flow records", distance)
    if isinstance(received_bytes, bool) or not isinstance(received_bytes, int) or received_bytes < 0:
        raise EngineFailure(f"Invalid received byte count {received_bytes!r}", distance)
    try:
        items = list(flow_records.items())
    except AttributeError:
        raise EngineFailure("Flow records must be keyed by flow id", distance) from None
    for flow_id, record in items:
        _check_record(flow_id, record, distance)
    records = [record for _, record in items]

    throughput = received_bytes * 8 / (scenario.app_duration * 1e6)  # Mbit/s

    rx_packets = sum(r.rx_packets for r in records)
    tx_packets = sum(r.tx_packets for r in records)
    lost_packets = sum(r.lost_packets for r in records)
    # fsum is exactly rounded, so the total does not depend on flow order
    delay_sum = math.fsum(r.delay_sum for r in records)

    avg_delay_ms = delay_sum / rx_packets * 1000.0 if rx_packets > 0 else 0.0
    loss_percent = 100.0 * lost_packets / tx_packets if tx_packets > 0 else 0.0

    return ScenarioResult(
        distance=float(distance),
        throughput_mbps=throughput,
        avg_delay_ms=avg_delay_ms,
        loss_percent=loss_percent,
    )
