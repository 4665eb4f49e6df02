#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>

class PMFError(Exception):
	"base class of all pgpmimefilter exceptions"

class KeyParseError(PMFError):
	"a public key could not be read, the key will be skipped"

class SigningKeyError(PMFError):
	"""the private key could not be read or unlocked,
	the mail will not be signed"""

class CryptoOperationError(PMFError):
	"""gpg refused to sign or encrypt, the mail can't be sent"""

class EncrypterStateError(PMFError):
	"an encrypter was used after it did already finish its mail"

