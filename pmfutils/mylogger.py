#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
import configparser
import os
from .child 			import _pmfchild
from .version 			import *
from   ._dbg 			import _dbg
from   .helpers			import *

import inspect
import time
import sys

if os.name=="nt":
	import logging
	import logging.handlers
else:
	import syslog

################
# CLASS mylogger
################

class mylogger(_pmfchild):
	l_none=1
	l_syslog=2
	l_file=3
	l_stderr=4

	#########
	#__init__
	#########

	def __init__(self,parent):
		self._level=0
		self.parent=parent
		self._LOGGING=self.l_none
		self._DEBUG=False
		self._systemmessages=[]
		_pmfchild.__init__(self,parent=parent,filename=__file__)
		self._level=0

		if os.name=="nt":
			self._initwindows()

		self.init()

	#############
	#_initwindows
	#############

	def _initwindows(self):
		self._logger=logging.getLogger("pgpmimefilter")
		self._loggingformatter=logging.Formatter("%(asctime)s: %(levelname)s:"
		" %(filename)s(%(lineno)d) %(message)s",datefmt="%a %d %H:%M:%S")
		self._logginghandler=logging.FileHandler(filename="pgpmimefilter.log")
		self._logginghandler.setFormatter(self._loggingformatter)
		self._logger.addHandler(self._logginghandler)

	#####
	#init
	#####

	def init(self):
		self._LOGFILE=""
		self._DEBUG=False
		self._level=0
		self._logfile=None

	######
	#close
	######

	@_dbg
	def close(self):

		if self._logfile!=None:
			self._logfile.close()
			self._logfile=None

		if os.name=="nt":
			logging.shutdown()
		elif self._LOGGING==self.l_syslog:
			syslog.closelog()

	################
	#read_configfile
	################

	@_dbg
	def read_configfile(self,cfg):

		if not cfg.has_section('logging'):
			return

		if cfg.has_option('logging','file'):
			self._LOGFILE=os.path.expanduser(cfg.get('logging','file').strip())

		if cfg.has_option('logging','log'):
			self.set_logging(cfg.get('logging','log'))

		try:
			self._DEBUG=cfg.getboolean('logging','debug')
		except ValueError:
			self.log("logging/debug has no boolean value","w")
		except configparser.NoOptionError:
			pass

	###################
	#_parse_commandline
	###################

	def _parse_commandline(self,_opts):

		for _opt, _arg in _opts:

			if _opt == '--version':
				print("pgpmimefilter version %s from %s"%(VERSION,DATE))
				sys.exit(0)

			if _opt  =='-l' or  _opt == '--log':
				self.set_logging(_arg)

	################
	#_prepare_syslog
	################

	def _prepare_syslog(self):
		self._LOGGING=self.l_syslog

		if os.name!="nt":
			syslog.openlog("pgpmimefilter",syslog.LOG_PID,syslog.LOG_MAIL)

	####
	#log
	####

	def log(self,
			msg,
			infotype="m",
			ln=-1,
			filename="",
			force=False):
		"prints logging information"

		if infotype=='w':
			self.parent._systemwarnings+=1
		elif infotype=='e':
			self.parent._systemerrors+=1

		if not ((self._LOGGING!=self.l_none) or (force==True)):
			return

		if infotype in ['d','m','w']:
			space=" "*self._level
		else:
			space=" "

		if ln==-1:
			ln=inspect.currentframe().f_back.f_back.f_lineno

		if filename==None or len(filename)==0:
			filename=inspect.getfile(inspect.currentframe().f_back)

		filename=os.path.split(filename)[1]
		_lftmsg=20
		prefix="Info"

		if infotype=='w':
			prefix="Warning"
		elif infotype=='e':
			prefix="Error"
		elif infotype=='d':
			prefix="Debug"

		prefix=prefix.ljust(7)
		t=time.localtime(time.time())
		_lntxt="%s %s:%s"%(filename.ljust(18),str(ln).rjust(4),space)
		tm=("%02d.%02d.%04d %02d:%02d:%02d:" % (t[2],t[1],t[0],t[3],
												t[4],t[5])).ljust(_lftmsg)

		if infotype in["w","e"]:
			self._systemmessages.append([tm[:-1],infotype,msg])

		txt=splitstring(msg,800)
		c=0

		for t in txt:

			if (ln>0):
				t=_lntxt+t

			l=len(txt)

			if l>1 and c<l-1:
				t=t+"\\"

			c+=1

			if self._LOGGING==self.l_syslog:

				if os.name=="nt":
					self._syslogwindows(t,infotype)
				else:
					self._sysloglinux(t,infotype)

			elif  (self._LOGGING==self.l_file
					and self._logfile!=None
					and not self._logfile.closed):
				self._logfile.write("%s %s:%s\n"%(tm,prefix,t ))
				self._logfile.flush()
			else:
				# print to stderr if nothing else works
				sys.stderr.write("%s %s:%s\n"%(tm,prefix,t ))

	###############
	#_syslogwindows
	###############

	def _syslogwindows(self,msg,infotype):

		if infotype=='w':
			self._logger.warning(msg)
		elif infotype=='e':
			self._logger.error(msg)
		elif infotype=='d':
			self._logger.debug(msg)
		else:
			self._logger.info(msg)

	#############
	#_sysloglinux
	#############

	def _sysloglinux(self,t,infotype):
		level=syslog.LOG_INFO

		if infotype=='w':
			level=syslog.LOG_WARNING
			t="WARNING "+t
		elif infotype=='e':
			level=syslog.LOG_ERR
			t="ERROR "+t
		elif infotype=='d':
			level=syslog.LOG_DEBUG
			t="DEBUG "+t

		syslog.syslog(level,t)

	######
	#debug
	######

	def debug(  self,
				msg,
				lineno=0,
				filename=""):
		"prints debugging information"

		if self._DEBUG:

			if lineno==0:
				ln=inspect.currentframe().f_back.f_lineno
			else:
				ln=lineno

			if filename==None or len(filename)==0:
				filename=inspect.getfile(inspect.currentframe().f_back)

			self.log(msg,"d",ln,filename=filename)

	############
	#set_logging
	############

	def set_logging( self, logmode):

		if not isinstance(logmode,str):
			return

		logmode=logmode.strip().lower()

		if logmode=="syslog":

			if self._LOGGING!=self.l_syslog:
				self._prepare_syslog()

		elif logmode=="stderr":
			self._LOGGING=self.l_stderr
		elif logmode=="file":
			self._LOGGING=self.l_file
			self._set_logmode()
		else:
			self._LOGGING=self.l_none

	############
	#get_logging
	############

	def get_logging( self):

		if self._LOGGING==self.l_syslog:
			return "syslog"
		elif self._LOGGING==self.l_stderr:
			return "stderr"
		elif self._LOGGING==self.l_file:
			return "file"
		else:
			return "none"

	#############
	#_set_logmode
	#############

	def _set_logmode(self):

		if (self._LOGGING!=self.l_file
		or len(self._LOGFILE)==0
		or self._logfile!=None):
			return

		try:
			self._logfile = open(self._LOGFILE,
									mode='a',
									encoding="UTF-8",
									errors=unicodeerror)
		except OSError:
			self._logfile=None
			self._LOGGING=self.l_stderr
			self.log("log file '%s' could not be opened"%self._LOGFILE,"e")

	##########
	#set_debug
	##########

	def set_debug(self,dbg):
		"set debug mode"

		if dbg:
			self._DEBUG=True

			if os.name=="nt":
				self._logger.setLevel(logging.DEBUG)
		else:
			self._DEBUG=False

			if os.name=="nt":
				self._logger.setLevel(logging.INFO)

	#############
	#is_debugging
	#############

	def is_debugging(self):
		"returns True if pgpmimefilter is in debugging mode"
		return self._DEBUG

