import sys

from wifidist import silent
from wifidist.errors import CampaignError, ConfigurationError, EngineFailure
from wifidist.metrics import aggregate
from wifidist.topology import Configurator


class Campaign:
	"""
	Runs the scenarios one after the other, each through
	configure -> run -> collect -> aggregate -> persist -> teardown.
	The next scenario is only configured once the previous engine instance
	has been destroyed. The first fatal error aborts the campaign.
	"""
	def __init__(self, conf, engine, sink, scenarios, verboseprint=None):
		self.conf = conf
		self.engine = engine
		self.sink = sink
		self.scenarios = list(scenarios)
		self.configurator = Configurator(conf)
		self.verboseprint = verboseprint or silent
		self.results = []

	def validate(self):
		for scenario in self.scenarios:
			scenario.validate()

	def run(self):
		# every scenario is checked before the engine is touched
		self.validate()
		self.sink.initialize()
		for scenario in self.scenarios:
			self.results.append(self.run_scenario(scenario))
		return self.results

	def _engine_call(self, scenario, what, fn, *args):
		try:
			return fn(*args)
		except CampaignError as e:
			if e.distance is None:
				e.distance = scenario.distance
			raise
		except Exception as e:
			raise EngineFailure(f"Engine failed to {what}: {e}", scenario.distance) from e

	def _teardown_after_failure(self, scenario, handle):
		# the failure already in flight is the one to report
		try:
			self._engine_call(scenario, "tear down the network", self.engine.destroy, handle)
		except CampaignError as e:
			print(f"Teardown after failure also failed: {e}", file=sys.stderr)

	def run_scenario(self, scenario):
		try:
			topology, plan = self.configurator.configure(scenario)
		except ConfigurationError as e:
			if e.distance is None:
				e.distance = scenario.distance
			raise
		except (TypeError, ValueError) as e:
			raise ConfigurationError(f"Invalid topology parameters: {e}", scenario.distance) from e

		handle = self._engine_call(scenario, "build the network", self.engine.build, topology, plan)
		try:
			self._engine_call(scenario, "run", self.engine.run, handle, scenario.sim_stop)
			receivedBytes = self._engine_call(scenario, "report received bytes",
				self.engine.get_received_bytes, handle, plan.sink.endpoint)
			flowRecords = self._engine_call(scenario, "report flow records", self.engine.get_flow_records, handle)
			result = aggregate(receivedBytes, flowRecords, scenario)
			self.sink.append(result)
		except BaseException:
			self._teardown_after_failure(scenario, handle)
			raise
		self._engine_call(scenario, "tear down the network", self.engine.destroy, handle)

		self.verboseprint(f"Distance {result.distance:.2f} m"
			f" | Thr {result.throughput_mbps:.2f} Mbps"
			f" | AvgDelay {result.avg_delay_ms:.2f} ms"
			f" | Loss {result.loss_percent:.2f} %")
		return result
