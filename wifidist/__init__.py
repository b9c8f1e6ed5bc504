def silent(*args, **kwargs):
	""" verboseprint stand-in for quiet runs """
	pass
