import yaml

from wifidist.errors import ConfigurationError


def _coerce(name, default, value, path):
	""" Convert a YAML override to the type of the default it replaces. """
	error = ConfigurationError(f"{path}: {name} must be {type(default).__name__}, got {value!r}")
	if isinstance(default, list):
		if not isinstance(value, (list, tuple)):
			raise error
		if not default:
			return list(value)
		return [_coerce(name, default[0], v, path) for v in value]
	if isinstance(default, bool) or isinstance(value, bool):
		if type(default) is not type(value):
			raise error
		return value
	if isinstance(default, int):
		if isinstance(value, float) and value.is_integer():
			return int(value)
		kinds = (int, str)
	elif isinstance(default, float):
		kinds = (int, float, str)
	elif isinstance(default, str):
		if not isinstance(value, str):
			raise error
		return value
	else:
		return value
	if not isinstance(value, kinds):
		raise error
	try:
		return type(default)(value)
	except ValueError:
		raise error from None


class Config:
	def __init__(self):
		self.SEED = 44

		### Campaign ###
		self.DISTANCES = [5.0, 10.0, 20.0, 35.0, 50.0]  # meters between AP and the STA cluster
		self.NR_STATIONS = 3
		self.APP_START = 1.0  # seconds
		self.APP_STOP = 10.0  # seconds
		self.SIM_STOP = 12.0  # seconds
		self.CSV_PATH = "results.csv"

		### Topology & traffic ###
		self.STATION_OFFSET = 3.0  # lateral spacing of stations (m)
		self.START_STAGGER = 0.1  # seconds between consecutive sender starts
		self.SINK_PORT = 5000
		self.SUBNET = "10.1.1.0/24"
		self.SEND_SIZE = 1448  # typical TCP payload (bytes)
		self.SSID = "wifi-distance-ssid"

		### Radio (802.11a) ###
		self.FREQ = 5.18e9  # Hz
		self.PTX = 16.0206  # dBm
		self.GL = 0.0  # antenna gain (dBi)
		self.LPLD0 = 46.6777  # path loss at reference distance (dB)
		self.D0 = 1.0  # reference distance (m)
		self.GAMMA = 3.0  # path loss exponent
		self.BANDWIDTH = 20e6  # Hz
		self.NOISE_FIGURE = 7.0  # dB
		self.FADING_STD = 2.0  # dB, log-normal fading per transmission

		### MAC ###
		self.SLOT_TIME = 9e-6  # s
		self.SIFS = 16e-6  # s
		self.CW_MIN = 15
		self.CW_MAX = 1023
		self.RETRY_LIMIT = 7
		self.PHY_OVERHEAD = 20e-6  # preamble + PLCP header (s)
		self.MAC_HEADER = 36  # MAC header + LLC/SNAP + FCS (bytes)
		self.IP_TCP_HEADER = 40  # bytes
		self.ACK_BYTES = 40  # TCP ACK segment (bytes)
		self.MAC_ACK_TIME = 44e-6  # SIFS + MAC ACK at base rate (s)

		### TCP ###
		self.INIT_CWND = 10  # segments
		self.MAX_CWND = 64  # segments
		self.RTO = 0.2  # s
		self.DELAYED_ACK = 2  # segments per ACK

	def load(self, path):
		""" Override defaults from a YAML mapping of attribute names (any case) to values. """
		try:
			with open(path, 'r') as file:
				overrides = yaml.load(file, Loader=yaml.FullLoader)
		except (OSError, yaml.YAMLError) as e:
			raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
		if overrides is None:
			return self
		if not isinstance(overrides, dict):
			raise ConfigurationError(f"Config file {path} must contain a mapping")
		for key, value in overrides.items():
			name = str(key).upper()
			if not hasattr(self, name):
				raise ConfigurationError(f"Unknown config key in {path}: {key}")
			setattr(self, name, _coerce(name, getattr(self, name), value, path))
		return self
