#!/usr/bin/env python3
#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
"""
pgpmimefilter converts an outgoing e-mail into an OpenPGP/MIME (RFC 3156)
protected e-mail, before it is handed over to the mail transport.

It supports
* PGP/MIME signed mails (multipart/signed)
* PGP/MIME encrypted mails (multipart/encrypted), optionally signed

If neither a public key of a recipient nor a usable signing key is available,
the e-mail is returned unchanged.

It can be used as a filter on the command line or as a module:

	with pmf() as p:
	  protected=p.encrypt_mail(mailtext,[armored_publickey])

Usage:
Create a configuration file with "pgpmimefilter.py -x > ~/pgpmimefilter.conf"
and copy this file into the directory /etc
"""
import configparser
import getopt
import os
import shutil
import sys
import tempfile
import traceback
import pmfutils.mylogger 		as mylogger
from   pmfutils._dbg 		  	import _dbg
from   pmfutils.encrypter		import _Encrypter
from   pmfutils.errors			import CryptoOperationError
from   pmfutils.gpgclass 		import _GPG
from   pmfutils.helpers			import *
from   pmfutils.policy			import *
from   pmfutils.usage       	import show_usage,print_exampleconfig
from   pmfutils.version			import *

__all__ =["pmf","openpgp_encrypt","CryptoOperationError"]

####
#pmf
####

class pmf:
	"""
	Main class to protect emails
	create an instance of pmf via 'with pmf() as p'
	example:
	with pmf() as p:
	  p.set_signingkey(armored_privatekey,"passphrase")
	  mail=p.encrypt_mail(mailtext,[armored_publickey])

	this will be all to sign and encrypt the mail
	"""

	#########
	#__init__
	#########

	def __init__(self,configfile=None):
		"""class creator
		'configfile' replaces the default config file /etc/pgpmimefilter.conf
		"""
		self._tempdirs=list()
		self.reset_statistics()
		self._systemerrors=0
		self._systemwarnings=0
		self._logger=mylogger.mylogger(parent=self)
		self.reset_messages()
		self.init(configfile)

	#################
	#reset_statistics
	#################

	def reset_statistics(self):
		self._count_totalmails=0
		self._count_encryptedmails=0
		self._count_signedmails=0
		self._count_unchangedmails=0
		self._count_failedmails=0

	###############
	#reset_messages
	###############

	def reset_messages(self):
		self._systemerrors=0
		self._systemwarnings=0
		self._logger._systemmessages=[]

	#########
	#__exit__
	#########

	def __exit__(self, exc_type, exc_value, traceback):
		"automatic clean up temporary keyrings when created with 'with'"
		self.close()

	##########
	#__enter__
	##########

	def __enter__(self):
		"necessary for the 'with'-creation"
		return self

	######
	#close
	######

	@_dbg
	def close(self):
		"cleans up temporary keyrings"

		for d in list(self._tempdirs):
			self._del_tempdir(d)

		self._logger.close()

	#####
	#init
	#####

	@_dbg
	def init(self,configfile=None):
		"initialises the module and reads the config file"
		v=default_values()
		self._GPGCMD=v["GPGCMD"]
		self._CONFIGFILE=v["CONFIGFILE"]

		if configfile:
			self._CONFIGFILE=configfile

		self._MINIMUMKEYBITS=v["MINIMUMKEYBITS"]
		self._SIGN=True
		self._SIGNINGKEY=None
		self._PASSPHRASE=None
		self._INFILE=""
		self._OUTFILE=""
		self._KEYFILES=[]
		self._logger.init()
		self._read_configfile()

	#################
	#_read_configfile
	#################

	@_dbg
	def _read_configfile(self):
		_cfg = configparser.ConfigParser(	inline_comment_prefixes=("#",),
											comment_prefixes=("#",),
											interpolation=None)

		try:
			_cfg.read(self._CONFIGFILE)
		except configparser.Error:
			self.log("Could not read config file '%s'"%self._CONFIGFILE,"e",
			force=True)
			self.log_traceback()
			return

		#logging
		self._logger.read_configfile(_cfg)
		self._logger._set_logmode()

		#default
		if _cfg.has_section('default'):

			try:
				self._SIGN=_cfg.getboolean('default','sign')
			except ValueError:
				self.log("default/sign has no boolean value","w")
			except configparser.NoOptionError:
				pass

			if _cfg.has_option('default','signingkey'):
				f=_cfg.get('default','signingkey').strip()

				if len(f)>0:
					self._SIGNINGKEY=self._read_keyfile(f)

			if _cfg.has_option('default','passphrase'):
				self._PASSPHRASE=_cfg.get('default','passphrase')

		#gpg
		if _cfg.has_section('gpg'):

			if _cfg.has_option('gpg','gpgcommand'):
				self._GPGCMD=_cfg.get('gpg','gpgcommand').strip()

			try:
				self._MINIMUMKEYBITS=_cfg.getint('gpg','minimumkeybits')
			except ValueError:
				self.log("gpg/minimumkeybits is no number","w")
			except configparser.NoOptionError:
				pass

	##############
	#_read_keyfile
	##############

	@_dbg
	def _read_keyfile(self,f):
		"returns the content of the key file 'f' or None if it can't be read"

		try:

			with open(os.path.expanduser(f),encoding="UTF-8",
					errors=unicodeerror) as keyfile:
				return keyfile.read()

		except OSError:
			self.log("Could not read key file '%s'"%f,"e")
			return None

	###################
	#_parse_commandline
	###################

	@_dbg
	def _parse_commandline(self,argv=None):

		if argv==None:
			argv=sys.argv[1:]

		try:
			_opts,_remainder=getopt.gnu_getopt(argv,'c:f:hk:l:m:np:s:vx',
			  [	'config=',
				'example',
				'help',
				'key=',
				'log=',
				'nosign',
				'passphrase=',
				'signingkey=',
				'verbose',
				'version'])
		except getopt.GetoptError as e:
			self.log("unknown commandline parameter '%s'"%e,"e",force=True)
			sys.exit(2)

		for _opt, _arg in _opts:

			if (_opt  =='-c' or  _opt == '--config') and _arg!=None:
				_arg=_arg.strip()

				if len(_arg)>0:
					self.log("read new config file '%s'"%_arg)
					self.init(_arg)
					break

		self._logger._parse_commandline(_opts)

		for _opt, _arg in _opts:

			if _opt  =='-f':
				self._INFILE=os.path.expanduser(_arg)
				self.debug("Set _INFILE to '%s'"%self._INFILE)

			if _opt  =='-h' or  _opt == '--help':
				show_usage()
				sys.exit(0)

			if _opt  =='-k' or  _opt == '--key':
				self._KEYFILES.append(os.path.expanduser(_arg))

			if _opt  =='-m':
				self._OUTFILE=os.path.expanduser(_arg)
				self.debug("Set _OUTFILE to '%s'"%self._OUTFILE)

			if _opt  =='-n' or  _opt == '--nosign':
				self._SIGN=False

			if _opt  =='-p' or  _opt == '--passphrase':
				self._PASSPHRASE=_arg

			if _opt  =='-s' or  _opt == '--signingkey':
				self._SIGNINGKEY=self._read_keyfile(_arg)

			if _opt  =='-v' or  _opt == '--verbose':
				self.set_debug(True)

			if _opt  =='-x' or  _opt == '--example':
				print_exampleconfig()
				sys.exit(0)

		if len(_remainder)>0:
			self.log("ignored commandline arguments '%s'"%
					" ".join(_remainder),"w")

	####
	#log
	####

	def log(self,
			msg,
			infotype="m",
			lineno=-1,
			filename="",
			force=False):
		self._logger.log(msg,infotype,lineno,filename,force=force)

	##############
	#log_traceback
	##############

	def log_traceback(self):
		"logs the exception information"
		exc_type, exc_value, exc_tb = sys.exc_info()
		error=traceback.format_exception(exc_type, exc_value, exc_tb)

		for e in error:
			self.log(" ***%s"%e.replace("\n",""),"e",force=True)

	######
	#debug
	######

	def debug(  self,
				msg,
				lineno=0,
				filename=""):
		"prints debugging information"
		self._logger.debug(msg,lineno,filename)

	######
	#error
	######

	def error(	self,
				msg,
				lineno=0,
				filename=""):
		"""logs as error message. When logging is disabled,
		this will log to stderr"""
		self.log(msg,infotype="e",lineno=lineno,filename=filename,force=True)

	########
	#warning
	########

	def warning(self,
				msg,
				lineno=0,
				filename=""):
		"""logs as warning message."""
		self.log(msg,infotype="w",lineno=lineno,filename=filename,force=False)

	############
	#set_logging
	############

	def set_logging( self, logmode):
		self._logger.set_logging(logmode)

	############
	#get_logging
	############

	def get_logging( self):
		return self._logger.get_logging()

	##########
	#set_debug
	##########

	def set_debug(self,dbg):
		"set debug mode"
		self._logger.set_debug(dbg)

	##########
	#get_debug
	##########

	def get_debug(self):
		return self._logger.is_debugging()

	#############
	#is_debugging
	#############

	def is_debugging(self):
		"returns True if pgpmimefilter is in debugging mode"

		if not hasattr(self,"_logger"):
			return False

		return self._logger.is_debugging()

	###############
	#set_configfile
	###############

	@_dbg
	def set_configfile(self,f):
		"loads the configfile f without any init"

		if not f:
			return

		cf=f.strip()

		if len(cf)>0:
			self._CONFIGFILE=cf
			self.debug("read new config file '%s'"%self._CONFIGFILE)
			self._read_configfile()

	###############
	#set_signingkey
	###############

	@_dbg
	def set_signingkey(self,key,passphrase=None):
		"""sets the armored private key and its passphrase, that are used
		for all following mails"""
		self._SIGNINGKEY=key
		self._PASSPHRASE=passphrase

	#########
	#set_sign
	#########

	def set_sign(self,sign):
		"if False, mails won't be signed by default"
		self._SIGN=sign is not False

	#########
	#get_sign
	#########

	def get_sign(self):
		return self._SIGN

	###################
	#set_minimumkeybits
	###################

	def set_minimumkeybits(self,bits):
		"rsa, dsa and elgamal keys shorter than 'bits' will be refused"
		self._MINIMUMKEYBITS=int(bits)

	#############
	#_new_tempdir
	#############

	@_dbg
	def _new_tempdir(self):
		"creates a new temporary directory"
		d=tempfile.mkdtemp(prefix='pmf-')
		self._tempdirs.append(d)
		self.debug("_new_tempdir %s"%d)
		return d

	#############
	#_del_tempdir
	#############

	@_dbg
	def _del_tempdir(self,d):
		"deletes the temporary directory d"

		if not isinstance(d,str):
			return

		self.debug("_del_tempdir:%s"%d)

		if d in self._tempdirs:
			self._tempdirs.remove(d)

		shutil.rmtree(d,ignore_errors=True)

	############
	#gpg_factory
	############

	@_dbg
	def gpg_factory(self):
		"returns a _GPG object"
		return _GPG(parent=self)

	##################
	#encrypter_factory
	##################

	@_dbg
	def encrypter_factory(	self,
							encryptionkeys=None,
							signingkey=None,
							passphrase=None,
							sign=None,
							randomsource=None):
		"""returns an _Encrypter object for one mail.
		If 'signingkey', 'passphrase' or 'sign' are not set, the values of
		set_signingkey() and set_sign() resp. the config file are used.
		"""

		if signingkey==None:
			signingkey=self._SIGNINGKEY

			if passphrase==None:
				passphrase=self._PASSPHRASE

		if sign==None:
			sign=self._SIGN

		return _Encrypter(	self,
							encryptionkeys=encryptionkeys,
							signingkey=signingkey,
							passphrase=passphrase,
							sign=sign,
							randomsource=randomsource)

	#############
	#encrypt_mail
	#############

	@_dbg
	def encrypt_mail(	self,
						mailtext,
						encryptionkeys=None,
						sign=None,
						signingkey=None,
						passphrase=None):
		"""returns the mail 'mailtext' signed and/or encrypted as bytes.
		'encryptionkeys' is a list of armored public keys.
		The mail is returned unchanged, if it can neither be signed nor
		encrypted.
		raises CryptoOperationError if gpg refuses to sign or encrypt
		"""
		self._count_totalmails+=1
		encrypter=self.encrypter_factory(	encryptionkeys=encryptionkeys,
											signingkey=signingkey,
											passphrase=passphrase,
											sign=sign)
		encrypter.update(mailtext)

		try:
			result=encrypter.finish()
		except CryptoOperationError as e:
			self._count_failedmails+=1
			self.log("mail could not be protected: %s"%e,"e")
			raise

		if encrypter.mode in (MODE_ENCRYPT,MODE_ENCRYPTSIGN):
			self._count_encryptedmails+=1

		if encrypter.mode in (MODE_SIGN,MODE_ENCRYPTSIGN):
			self._count_signedmails+=1

		if encrypter.mode==MODE_PASSTHROUGH:
			self._count_unchangedmails+=1

		self.debug("mail protected with mode %s"%modename(encrypter.mode))
		return result

	###############
	#get_statistics
	###############

	@_dbg
	def get_statistics(self):
		"returns how many mails were handled"
		return {"total":self._count_totalmails,
			"total encrypt":self._count_encryptedmails,
			"total sign":self._count_signedmails,
			"total unchanged":self._count_unchangedmails,
			"total failed":self._count_failedmails,
			"systemerrors":self._systemerrors,
			"systemwarnings":self._systemwarnings,
			}

	###########
	#scriptmode
	###########

	@_dbg
	def scriptmode(self):
		"run pgpmimefilter as a script"

		try:

			if len(self._INFILE)>0:

				with open(self._INFILE,mode="rb") as f:
					raw=f.read()

			else:
				raw=sys.stdin.buffer.read()

		except OSError:
			self.log("Could not open Inputfile '%s'"%self._INFILE,"e")
			self.log_traceback()
			sys.exit(2)

		keys=[]

		for f in self._KEYFILES:
			key=self._read_keyfile(f)

			if key!=None:
				keys.append(key)

		try:
			result=self.encrypt_mail(raw,keys)
		except CryptoOperationError:
			sys.exit(3)

		if len(self._OUTFILE)>0:

			try:

				with open(self._OUTFILE,mode="wb") as f:
					f.write(result)

			except OSError:
				self.log("Could not write Outputfile '%s'"%self._OUTFILE,"e")
				self.log_traceback()
				sys.exit(2)

		else:
			sys.stdout.buffer.write(result)
			sys.stdout.buffer.flush()

		self.debug("Program exits without errors")

################
#openpgp_encrypt
################

def openpgp_encrypt(signingkey=None,
					passphrase=None,
					sign=True,
					parent=None,
					configfile=None):
	"""returns a handler for mail pipelines, that protects every mail.
	The signing key is set once, the public keys are given per mail:

	handler=openpgp_encrypt(signingkey=armored_privatekey,passphrase="pw")
	protected=handler(mailtext,[armored_publickey])

	If 'parent' is a pmf object, it will be used for logging and
	statistics, otherwise every mail gets its own pmf object, which reads
	'configfile' resp. the default config file.
	"""
	defaultsign=sign

	def handler(mailtext,encryptionkeys=None,sign=None):

		if sign==None:
			sign=defaultsign

		if encryptionkeys==None:
			encryptionkeys=[]
		elif isinstance(encryptionkeys,(str,bytes)):
			encryptionkeys=[encryptionkeys]

		if (len(encryptionkeys)==0
		and (not signingkey or sign is False)):
			return to_bytes(mailtext)

		if parent!=None:
			return parent.encrypt_mail(	mailtext,
										encryptionkeys,
										sign=sign,
										signingkey=signingkey,
										passphrase=passphrase)

		with pmf(configfile) as p:
			return p.encrypt_mail(	mailtext,
									encryptionkeys,
									sign=sign,
									signingkey=signingkey,
									passphrase=passphrase)

	return handler

#####
#main
#####

def main(argv=None):
	"main routine which will be called when pgpmimefilter "
	"is started as a script, not as a module"

	with pmf() as p:
		p._parse_commandline(argv)
		p.scriptmode()

###########################
#pgpmimefilter main program
###########################

if __name__ == "__main__":
	main()
