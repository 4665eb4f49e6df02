#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>

MODE_PASSTHROUGH=1
MODE_SIGN=2
MODE_ENCRYPT=3
MODE_ENCRYPTSIGN=4

_modenames={MODE_PASSTHROUGH:"PASSTHROUGH",
			MODE_SIGN:"SIGN",
			MODE_ENCRYPT:"ENCRYPT",
			MODE_ENCRYPTSIGN:"ENCRYPTSIGN"}

#######
#decide
#######

def decide(has_public_keys,has_private_key,sign=True):
	"""returns how a mail will be protected.
	Only 'sign=False' switches signing off, any other value keeps it on.
	"""
	signing=has_private_key and sign is not False

	if has_public_keys:

		if signing:
			return MODE_ENCRYPTSIGN

		return MODE_ENCRYPT

	if signing:
		return MODE_SIGN

	return MODE_PASSTHROUGH

#########
#modename
#########

def modename(mode):
	return _modenames.get(mode,"UNKNOWN")

