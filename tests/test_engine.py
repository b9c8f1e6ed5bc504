import unittest

from wifidist.config import Config
from wifidist.engine import SimpyWifiEngine
from wifidist.errors import EngineFailure
from wifidist.metrics import FlowRecord, aggregate
from wifidist.scenario import Scenario
from wifidist.topology import Configurator

class TestSimpyWifiEngine(unittest.TestCase):
    '''
    Short real runs of the bundled engine: half a second of traffic is
    enough to see distance matter while keeping the suite fast.
    '''

    def setUp(self):
        self.conf = Config()
        self.engine = SimpyWifiEngine(self.conf)
        self.configurator = Configurator(self.conf)

    def run_scenario(self, distance, station_count=3):
        scenario = Scenario(distance=distance, station_count=station_count, app_start=0.1, app_stop=0.6, sim_stop=0.7)
        topology, plan = self.configurator.configure(scenario)
        handle = self.engine.build(topology, plan)
        try:
            self.engine.run(handle, scenario.sim_stop)
            received = self.engine.get_received_bytes(handle, plan.sink.endpoint)
            records = self.engine.get_flow_records(handle)
        finally:
            self.engine.destroy(handle)
        return scenario, received, records

    def test_traffic_flows(self):
        scenario, received, records = self.run_scenario(5.0)
        self.assertGreater(received, 0, "AP sink received data")
        # one data flow and one ACK flow per station
        self.assertEqual(len(records), 6)
        for record in records.values():
            self.assertIsInstance(record, FlowRecord)
            self.assertLessEqual(record.rx_packets + record.lost_packets, record.tx_packets)
        result = aggregate(received, records, scenario)
        self.assertGreater(result.throughput_mbps, 1.0)
        self.assertGreater(result.avg_delay_ms, 0.0)
        self.assertLessEqual(result.loss_percent, 100.0)

    def test_throughput_drops_with_distance(self):
        distances = self.conf.DISTANCES
        received = [self.run_scenario(d)[1] for d in distances]
        for i in range(1, len(distances)):
            # nearby links all run at the top rate, allow a little noise between them
            self.assertLessEqual(received[i], received[i - 1] * 1.05,
                f"{distances[i]} m should not beat {distances[i - 1]} m: {received}")
        self.assertGreater(received[0], 2 * received[-1], "far cluster is clearly slower")

    def test_deterministic(self):
        first = self.run_scenario(20.0)
        second = self.run_scenario(20.0)
        self.assertEqual(first[1], second[1])
        self.assertEqual(first[2], second[2])

    def test_zero_stations(self):
        _, received, records = self.run_scenario(10.0, station_count=0)
        self.assertEqual(received, 0)
        self.assertEqual(records, {})

    def test_no_overlapping_networks(self):
        scenario = Scenario(distance=5.0)
        topology, plan = self.configurator.configure(scenario)
        handle = self.engine.build(topology, plan)
        with self.assertRaises(EngineFailure):
            self.engine.build(topology, plan)
        self.engine.destroy(handle)
        # destroyed state is released, a fresh build works
        self.engine.destroy(self.engine.build(topology, plan))

    def test_destroyed_handle(self):
        topology, plan = self.configurator.configure(Scenario(distance=5.0))
        handle = self.engine.build(topology, plan)
        self.engine.destroy(handle)
        with self.assertRaises(EngineFailure):
            self.engine.run(handle, 1.0)
        with self.assertRaises(EngineFailure):
            self.engine.get_flow_records(handle)

    def test_bad_stop_time(self):
        topology, plan = self.configurator.configure(Scenario(distance=5.0))
        handle = self.engine.build(topology, plan)
        try:
            with self.assertRaises(EngineFailure):
                self.engine.run(handle, -1.0)
        finally:
            self.engine.destroy(handle)

    def test_build_is_reported(self):
        printed = []
        engine = SimpyWifiEngine(self.conf, verboseprint=lambda *args: printed.append(" ".join(str(a) for a in args)))
        topology, plan = self.configurator.configure(Scenario(distance=5.0))
        engine.destroy(engine.build(topology, plan))
        self.assertEqual(printed, ["Built network: 1 AP + 3 STA, 3 flows"])

    def test_unknown_endpoint(self):
        topology, plan = self.configurator.configure(Scenario(distance=5.0, station_count=0))
        handle = self.engine.build(topology, plan)
        try:
            self.engine.run(handle, 0.5)
            with self.assertRaises(EngineFailure):
                self.engine.get_received_bytes(handle, "10.9.9.9:1")
        finally:
            self.engine.destroy(handle)


if __name__ == '__main__':
    unittest.main()
