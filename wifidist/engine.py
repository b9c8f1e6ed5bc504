import numpy as np
import simpy

from wifidist import silent
from wifidist.errors import EngineFailure
from wifidist.metrics import FlowRecord
from wifidist.phy import airtime, link_snr, packet_error_rate, select_rate


class SimulationEngine:
	"""
	What the campaign needs from a network simulator. run() is the only call
	that takes time; it blocks until simulated time reaches the stop time.
	"""
	def build(self, topology, traffic_plan):
		raise NotImplementedError

	def run(self, handle, stop_time):
		raise NotImplementedError

	def get_received_bytes(self, handle, endpoint):
		raise NotImplementedError

	def get_flow_records(self, handle):
		raise NotImplementedError

	def destroy(self, handle):
		raise NotImplementedError


class FlowStats:
	def __init__(self, src, dst, sport, dport):
		self.src = src
		self.dst = dst
		self.sport = sport
		self.dport = dport
		self.txPackets = 0
		self.rxPackets = 0
		self.lostPackets = 0
		self.delaySum = 0.0

	def record(self):
		return FlowRecord(self.txPackets, self.rxPackets, self.lostPackets, self.delaySum)


class TcpSender:
	def __init__(self, conf, env):
		self.cwnd = float(conf.INIT_CWND)
		self.inflight = 0
		self.unacked = 0  # delivered segments not yet covered by an ACK
		self.window_open = env.event()


class WifiRun:
	""" Handle for one built network: its own event queue, RNG, channel and counters. """
	def __init__(self, conf, topology, traffic_plan, seed):
		self.conf = conf
		self.topology = topology
		self.plan = traffic_plan
		self.env = simpy.Environment()
		self.rng = np.random.default_rng(seed)
		# a single half-duplex channel shared by the whole BSS
		self.channel = simpy.Resource(self.env, capacity=1)
		self.nodes = {n.node_id: n for n in topology.nodes}
		self.sinkBytes = {traffic_plan.sink.endpoint: 0}
		self.flows = {}
		self.flowIds = {}
		self.ran = False
		self.destroyed = False

	def flow_stats(self, src, dst, sport, dport):
		key = (src, dst, sport, dport)
		if key not in self.flowIds:
			self.flowIds[key] = len(self.flowIds) + 1
			self.flows[self.flowIds[key]] = FlowStats(*key)
		return self.flows[self.flowIds[key]]

	def install(self):
		for port, flow in enumerate(self.plan.flows, start=49153):
			if flow.source not in self.nodes:
				raise EngineFailure(f"Flow source node {flow.source} is not part of the topology")
			if flow.destination not in self.sinkBytes:
				raise EngineFailure(f"No sink listening on {flow.destination}")
			if flow.send_size <= 0:
				raise EngineFailure(f"Invalid send size {flow.send_size}")
			self.env.process(self.bulk_send(flow, port))

	def transmit(self, link, ipBytes, stats):
		""" One IP packet through the MAC: contend, send, retry with backoff; returns whether it arrived """
		conf = self.conf
		env = self.env
		stats.txPackets += 1
		enqueued = env.now
		snr, rate, threshold = link
		cw = conf.CW_MIN
		for _ in range(conf.RETRY_LIMIT + 1):
			with self.channel.request() as req:
				yield req
				backoff = int(self.rng.integers(0, cw + 1)) * conf.SLOT_TIME
				yield env.timeout(conf.SIFS + 2 * conf.SLOT_TIME + backoff + airtime(conf, ipBytes, rate))
				faded = snr + self.rng.normal(0.0, conf.FADING_STD)
				ok = self.rng.random() >= packet_error_rate(faded, threshold)
				if ok:
					yield env.timeout(conf.MAC_ACK_TIME)
			if ok:
				stats.rxPackets += 1
				stats.delaySum += env.now - enqueued
				return True
			cw = min(2 * cw + 1, conf.CW_MAX)
		stats.lostPackets += 1
		return False

	def send_ack(self, sender, link, stats, covered):
		delivered = yield self.env.process(self.transmit(link, self.conf.ACK_BYTES, stats))
		if delivered:
			sender.inflight = max(0, sender.inflight - covered)
			sender.cwnd = min(sender.cwnd + covered / sender.cwnd, self.conf.MAX_CWND)
			if not sender.window_open.triggered:
				sender.window_open.succeed()

	def bulk_send(self, flow, port):
		conf = self.conf
		env = self.env
		sink = self.plan.sink
		sta = self.nodes[flow.source]
		ap = self.nodes[sink.node_id]
		snr = link_snr(conf, sta.position.euclidean_distance(ap.position))
		dataLink = (snr,) + select_rate(conf, snr, flow.send_size + conf.IP_TCP_HEADER)
		ackLink = (snr,) + select_rate(conf, snr, conf.ACK_BYTES)
		if flow.start >= flow.stop:
			return
		yield env.timeout(flow.start)

		data = self.flow_stats(sta.address, flow.destination.address, port, flow.destination.port)
		acks = self.flow_stats(flow.destination.address, sta.address, flow.destination.port, port)
		sender = TcpSender(conf, env)
		sent = 0
		while env.now < flow.stop and (flow.max_bytes == 0 or sent < flow.max_bytes):
			if sender.inflight >= int(sender.cwnd):
				sender.window_open = env.event()
				result = yield sender.window_open | env.timeout(conf.RTO)
				if sender.window_open not in result:
					# retransmission timeout: collapse the window and resend
					sender.cwnd = max(1.0, sender.cwnd / 2)
					sender.inflight = 0
					sender.unacked = 0
				continue
			size = flow.send_size if flow.max_bytes == 0 else min(flow.send_size, flow.max_bytes - sent)
			sender.inflight += 1
			delivered = yield env.process(self.transmit(dataLink, size + conf.IP_TCP_HEADER, data))
			if not delivered:
				sender.inflight -= 1
				sender.cwnd = max(1.0, sender.cwnd / 2)
				yield env.timeout(conf.RTO)
				continue
			sent += size
			if sink.start <= env.now < sink.stop:
				self.sinkBytes[flow.destination] += size
			sender.unacked += 1
			if sender.unacked >= conf.DELAYED_ACK:
				env.process(self.send_ack(sender, ackLink, acks, sender.unacked))
				sender.unacked = 0


class SimpyWifiEngine(SimulationEngine):
	"""
	Minimal infrastructure-mode WiFi network on simpy: 802.11a links with ideal
	rate control, one shared channel with CSMA/CA style backoff, and window
	limited TCP bulk transfers acknowledged by the AP.

	Only one network may exist at a time; destroy() must be called before the
	next build().
	"""
	def __init__(self, conf, verboseprint=None):
		self.conf = conf
		self.verboseprint = verboseprint or silent
		self._live = None

	def _check(self, handle):
		if not isinstance(handle, WifiRun) or handle.destroyed:
			raise EngineFailure("Engine handle is not live")

	def build(self, topology, traffic_plan):
		if self._live is not None:
			raise EngineFailure("A previous network is still alive; destroy it before building another")
		handle = WifiRun(self.conf, topology, traffic_plan, self.conf.SEED)
		handle.install()
		self._live = handle
		self.verboseprint(f'Built network: 1 AP + {len(topology.stations)} STA, {len(traffic_plan.flows)} flows')
		return handle

	def run(self, handle, stop_time):
		self._check(handle)
		if handle.ran:
			raise EngineFailure("Network has already been run")
		handle.ran = True
		try:
			handle.env.run(until=stop_time)
		except EngineFailure:
			raise
		except Exception as e:
			raise EngineFailure(f"Simulation failed: {e}") from e

	def get_received_bytes(self, handle, endpoint):
		self._check(handle)
		if endpoint not in handle.sinkBytes:
			raise EngineFailure(f"No sink listening on {endpoint}")
		return handle.sinkBytes[endpoint]

	def get_flow_records(self, handle):
		self._check(handle)
		return {flowId: stats.record() for flowId, stats in handle.flows.items()}

	def destroy(self, handle):
		if handle is self._live:
			self._live = None
		if isinstance(handle, WifiRun):
			handle.destroyed = True
			handle.flows = {}
			handle.flowIds = {}
			handle.sinkBytes = {}
			handle.env = None
			handle.channel = None
