class CampaignError(Exception):
	"""
	Fatal condition that aborts the whole campaign.

	distance: the scenario (in meters) that was in progress, if any
	"""
	def __init__(self, message, distance=None):
		super().__init__(message)
		self.distance = distance

	def __str__(self):
		message = super().__str__()
		if self.distance is None:
			return message
		return f"{message} (scenario distance {self.distance} m)"


class ConfigurationError(CampaignError):
	pass


class EngineFailure(CampaignError):
	pass


class PersistenceError(CampaignError):
	pass
