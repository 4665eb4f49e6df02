#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
from	.child 			import _pmfchild
from	.errors			import EncrypterStateError
from   	.helpers 		import make_boundary
from	.mailsplitter	import split_message
from	.messagebuffer	import _MessageBuffer
from	.multipart		import build_encrypted,build_signed,inner_part
from	.policy			import *
from	._dbg 			import _dbg

#################
#CLASS _Encrypter
#################

class _Encrypter(_pmfchild):
	"""transforms exactly one mail into an OpenPGP/MIME signed and/or
	encrypted mail. Feed the mail with update() and get the result with
	finish().
	Don't call this class directly, use pmf.encrypter_factory() instead!
	"""

	def __init__(   self,
					parent,
					encryptionkeys=None,
					signingkey=None,
					passphrase=None,
					sign=True,
					gpg=None,
					randomsource=None):
		_pmfchild.__init__(self,parent,filename=__file__)

		if encryptionkeys==None:
			encryptionkeys=[]
		elif isinstance(encryptionkeys,(str,bytes)):
			encryptionkeys=[encryptionkeys]

		self._encryptionkeys=list(encryptionkeys)
		self._signingkey=signingkey
		self._passphrase=passphrase
		self._sign=sign is not False
		self._gpg=gpg
		self._randomsource=randomsource
		self._buffer=_MessageBuffer()
		self._finished=False
		self.mode=None

	#######
	#update
	#######

	def update(self,chunk,encoding="UTF-8"):
		"adds the next chunk of the mail"

		if self._finished:
			raise EncrypterStateError("mail was already finished")

		self._buffer.append(chunk,encoding)

	#######
	#finish
	#######

	@_dbg
	def finish(self):
		"""returns the protected mail as bytes, or the unchanged mail if
		there is nothing to sign or encrypt.
		raises CryptoOperationError if gpg refuses to sign or encrypt
		"""

		if self._finished:
			raise EncrypterStateError("mail was already finished")

		self._finished=True
		raw=self._buffer.finalize()
		self.debug("_Encrypter.finish mail size %i"%len(raw))

		if self._gpg==None:
			self._gpg=self.parent.gpg_factory()

		try:
			return self._protect(raw)
		finally:
			self._gpg.close()

	#########
	#_protect
	#########

	def _protect(self,raw):
		parsed=split_message(raw)
		self.debug("content headers moved into the protected part: %s"%(
				", ".join(h.name for h in parsed.content_headers)))
		publickeys=self._gpg.load_public_keys(self._encryptionkeys)
		privatekey=None

		if self._sign and self._signingkey:
			result,value=self._gpg.load_private_key(self._signingkey,
													self._passphrase)

			if result:
				privatekey=value

		self.mode=decide(	len(publickeys)>0,
							privatekey!=None,
							self._sign)
		self.debug("protection mode %s"%modename(self.mode))

		if self.mode==MODE_PASSTHROUGH:
			return raw

		boundary=make_boundary(self._randomsource)
		content=inner_part(parsed)

		if self.mode==MODE_SIGN:
			signature=self._gpg.sign(content,privatekey)
			return build_signed(parsed,signature,boundary)

		if self.mode==MODE_ENCRYPT:
			privatekey=None

		ciphertext=self._gpg.encrypt(content,publickeys,privatekey)
		return build_encrypted(parsed,ciphertext,boundary)

