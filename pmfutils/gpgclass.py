#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
import os
import shutil
import subprocess
import tempfile
from	.child 			import _pmfchild
from	.errors			import CryptoOperationError,KeyParseError,SigningKeyError
from   	.helpers 		import *
from	._dbg 			import _dbg

#public key algorithms, whose strength depends on the key length
_sizedalgorithms={	1:"rsa",
					2:"rsa",
					3:"rsa",
					16:"elg",
					17:"dsa",
					20:"elg"}

###########
#CLASS _GPG
###########

class _GPG(_pmfchild):
	"""class to sign and encrypt mail content via gpg.
	Every instance uses its own temporary keyring, which will be removed
	with close().
	Don't call this class directly, use pmf.gpg_factory() instead!
	"""

	def __init__(   self,
					parent,
					gpgcmd=None,
					minimumkeybits=None):
		_pmfchild.__init__(self,parent,filename=__file__)
		self.debug("_GPG.__init__")
		v=default_values()

		if isinstance(gpgcmd,str):
			self._gpgcmd=gpgcmd
		elif self.parent:
			self._gpgcmd=self.parent._GPGCMD
		else:
			self._gpgcmd=v["GPGCMD"]

		if minimumkeybits!=None:
			self._minimumkeybits=minimumkeybits
		elif self.parent:
			self._minimumkeybits=self.parent._MINIMUMKEYBITS
		else:
			self._minimumkeybits=v["MINIMUMKEYBITS"]

		self._keyhome=None
		self._passphrasefile=None

	############
	#get_keyhome
	############

	def get_keyhome(self):
		"returns the temporary directory of the keyring, creates it if needed"

		if self._keyhome==None:

			if self.parent:
				self._keyhome=self.parent._new_tempdir()
			else:
				self._keyhome=tempfile.mkdtemp(prefix="pmf-")

			os.chmod(self._keyhome,0o700)
			self.debug("_GPG keyhome '%s' created"%self._keyhome)

		return self._keyhome

	###############
	#set_passphrase
	###############

	def set_passphrase(self,passphrase):
		"stores the passphrase of the signing key for the following gpg calls"
		self._passphrasefile=os.path.join(self.get_keyhome(),"passphrase")

		with open(	self._passphrasefile,
					"w",
					encoding="UTF-8",
					opener=lambda p,f:os.open(p,f,0o600)) as f:

			if passphrase:
				f.write(passphrase)

	#########
	#_command
	#########

	def _command(self,args,passphrase=False):
		cmd=[	self._gpgcmd,
				"--homedir",self.get_keyhome(),
				"--batch",
				"--yes",
				"--no-tty",
				"-q",
				"--no-secmem-warning",
				"--trust-model","always",
				"--status-fd","2"]

		if passphrase:

			if self._passphrasefile==None:
				self.set_passphrase(None)

			cmd+=[	"--pinentry-mode","loopback",
					"--passphrase-file",self._passphrasefile]

		return cmd+args

	#####
	#_run
	#####

	def _run(self,args,data=b"",passphrase=False):
		"""runs gpg with 'data' as input.
		returns the exit code, the output, the status lines and the
		other messages of gpg
		"""
		cmd=self._command(args,passphrase)
		self.debug("_GPG command: '%s'"%' '.join(cmd))

		try:
			p = subprocess.Popen(   cmd,
									stdin=subprocess.PIPE,
									stdout=subprocess.PIPE,
									stderr=subprocess.PIPE )
		except OSError as e:
			raise CryptoOperationError("gpg '%s' could not be started (%s)"%(
										self._gpgcmd,e))

		output,err=p.communicate(input=data)
		status=[]
		messages=[]

		for line in err.decode("UTF-8",unicodeerror).splitlines():

			if line.startswith("[GNUPG:] "):
				status.append(line[9:].split(" "))
			elif len(line.strip())>0:
				messages.append(line.strip())

		return p.returncode,output,status,"; ".join(messages)

	############
	#_import_key
	############

	def _import_key(self,key,passphrase=False):
		"imports an armored key, returns the fingerprints of the imported keys"

		if key==None or len(to_bytes(key).strip())==0:
			raise KeyParseError("key is empty")

		returncode,output,status,msg=self._run(	["--import"],
												to_bytes(key),
												passphrase=passphrase)
		fingerprints=[]

		for s in status:

			if (s[0]=="IMPORT_OK"
			and len(s)>2
			and s[2] not in fingerprints):
				fingerprints.append(s[2])

		if len(fingerprints)==0:
			raise KeyParseError(msg or "no key found (exit code %i)"%returncode)

		return fingerprints

	#################
	#load_public_keys
	#################

	@_dbg
	def load_public_keys(self,keys):
		"""imports every armored key of the list 'keys' on its own.
		Keys, that can't be read, are skipped.
		returns the list of fingerprints of all imported keys
		"""
		fingerprints=[]

		if keys==None:
			return fingerprints

		if isinstance(keys,(str,bytes)):
			keys=[keys]

		for i,key in enumerate(keys):

			try:
				fprs=self._import_key(key)
			except KeyParseError as e:
				self.log("public key #%i skipped, it could not be read: %s"%(
							i,e),"w")
				continue

			for f in fprs:

				if f not in fingerprints:
					fingerprints.append(f)

		self.debug("public keys loaded: %s"%str(fingerprints))
		return fingerprints

	#################
	#load_private_key
	#################

	@_dbg
	def load_private_key(self,key,passphrase=None):
		"""imports the armored private key 'key' and unlocks it with
		'passphrase'.

		return values:
		result: True if the key can sign, else False
		value: If 'result' is True the fingerprint of the key,
			   else the reason why it is not usable
		"""

		try:
			fingerprint=self._unlock_private_key(key,passphrase)
		except SigningKeyError as e:
			self.log("signing key not usable, mail will not be signed: %s"%e,
					"w")
			return False,str(e)

		self.debug("signing key loaded: %s"%fingerprint)
		return True,fingerprint

	####################
	#_unlock_private_key
	####################

	def _unlock_private_key(self,key,passphrase):

		if key==None or len(to_bytes(key).strip())==0:
			raise SigningKeyError("no signing key given")

		self.set_passphrase(passphrase)

		try:
			fingerprints=self._import_key(key,passphrase=True)
		except KeyParseError as e:
			raise SigningKeyError("signing key could not be read (%s)"%e)

		secretkeys=self._secret_fingerprints(fingerprints)

		if len(secretkeys)==0:
			raise SigningKeyError("signing key contains no private key")

		fingerprint=secretkeys[0]
		returncode,output,status,msg=self._run(	["--local-user",fingerprint,
												"--detach-sign"],
												b"",
												passphrase=True)

		if returncode!=0:

			if any(s[0] in ("BAD_PASSPHRASE","MISSING_PASSPHRASE")
					for s in status):
				raise SigningKeyError("wrong or missing passphrase")

			raise SigningKeyError("signing key can't be unlocked (%s)"%msg)

		return fingerprint

	#####################
	#_secret_fingerprints
	#####################

	def _secret_fingerprints(self,fingerprints):
		returncode,output,status,msg=self._run(["--list-secret-keys",
												"--with-colons"]+fingerprints)
		result=[]
		secret=False

		for line in output.decode("UTF-8",unicodeerror).splitlines():
			res=line.split(":")

			if res[0]=="sec":
				secret=True
			elif res[0]=="fpr" and secret and len(res)>9:

				if res[9] not in result:
					result.append(res[9])

				secret=False
			elif res[0]!="fpr":
				secret=False

		return result

	##################
	#check_keystrength
	##################

	def check_keystrength(self,fingerprint):
		"raises CryptoOperationError, if the key or one of its subkeys is too weak"
		returncode,output,status,msg=self._run(["--list-keys",
												"--with-colons",
												fingerprint])

		if returncode!=0:
			raise CryptoOperationError("key %s not found (%s)"%(fingerprint,msg))

		for line in output.decode("UTF-8",unicodeerror).splitlines():
			res=line.split(":")

			if res[0] not in ("pub","sub") or len(res)<4:
				continue

			if res[1] in ("r","e"):
				continue

			try:
				bits=int(res[2])
				algorithm=int(res[3])
			except ValueError:
				continue

			if (algorithm in _sizedalgorithms
			and bits<self._minimumkeybits):
				raise CryptoOperationError(
					"key %s is too weak: %s%i, at least %i bits are required"%(
					fingerprint,
					_sizedalgorithms[algorithm],
					bits,
					self._minimumkeybits))

	#####
	#sign
	#####

	@_dbg
	def sign(self,content,key):
		"returns the armored detached signature of the bytes 'content'"
		self.check_keystrength(key)
		returncode,signature,status,msg=self._run(	["--local-user",key,
													"--digest-algo","SHA512",
													"--armor",
													"--detach-sign"],
													to_bytes(content),
													passphrase=True)

		if returncode!=0 or len(signature)==0:
			raise CryptoOperationError("signing failed (%s)"%(
								msg or "gpg exit code %i"%returncode))

		return signature.decode("UTF-8",unicodeerror)

	########
	#encrypt
	########

	@_dbg
	def encrypt(self,content,publickeys,signingkey=None):
		"""returns the bytes 'content' encrypted for all 'publickeys' as
		armored text. If 'signingkey' is set, the content will be signed, too.
		"""

		if not publickeys:
			raise CryptoOperationError("no public key to encrypt for")

		args=["--armor","--encrypt"]

		for key in publickeys:
			self.check_keystrength(key)
			args+=["--recipient",key]

		if signingkey:
			self.check_keystrength(signingkey)
			args+=[	"--sign",
					"--local-user",signingkey,
					"--digest-algo","SHA512"]

		returncode,encdata,status,msg=self._run(args,
												to_bytes(content),
												passphrase=signingkey!=None)

		if returncode!=0 or len(encdata)==0:
			raise CryptoOperationError("encryption failed (%s)"%(
								msg or "gpg exit code %i"%returncode))

		return encdata.decode("UTF-8",unicodeerror)

	######
	#close
	######

	@_dbg
	def close(self):
		"stops the gpg-agent of the keyring and removes the keyring"

		if self._keyhome==None:
			return

		gpgconf=shutil.which("gpgconf")

		if gpgconf:

			try:
				subprocess.call([gpgconf,"--homedir",self._keyhome,
								"--kill","gpg-agent"],
								stdout=subprocess.DEVNULL,
								stderr=subprocess.DEVNULL)
			except OSError:
				self.log("gpg-agent of '%s' could not be stopped"%self._keyhome,
						"w")

		if self.parent:
			self.parent._del_tempdir(self._keyhome)
		else:
			shutil.rmtree(self._keyhome,ignore_errors=True)

		self._keyhome=None
		self._passphrasefile=None

