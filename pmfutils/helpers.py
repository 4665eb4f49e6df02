#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
import binascii
import os
import re

##############################################
#Definition of general functions and variables
##############################################

unicodeerror="replace"

###############
#default_values
###############

def default_values():
	return {"GPGCMD":"/usr/bin/gpg",
			"CONFIGFILE":"/etc/pgpmimefilter.conf",
			"MINIMUMKEYBITS":2047}

############
#splitstring
############

def splitstring(txt,length=80):

	def chunkstring(string, length):
		return (string[0+i:length+i] for i in range(0, len(string), length))

	return list(chunkstring(txt,length))

#########
#to_bytes
#########

def to_bytes(data,encoding="UTF-8"):
	"returns 'data' as bytes, strings will be encoded with 'encoding'"

	if isinstance(data,bytes):
		return data

	if isinstance(data,(bytearray,memoryview)):
		return bytes(data)

	if isinstance(data,str):
		return data.encode(encoding)

	raise TypeError("expected bytes or str, got %s"%type(data).__name__)

##########
#crlf_text
##########

def crlf_text(text):
	"""returns the (armored) text with CRLF line endings and without trailing
	whitespace as bytes"""

	if isinstance(text,bytes):
		text=text.decode("UTF-8",unicodeerror)

	return re.sub("\r?\n","\r\n",text.rstrip()).encode("UTF-8")

##############
#make_boundary
##############

def make_boundary(randomsource=None):
	"""returns a new multipart boundary 'nm_' followed by 28 hex characters.
	'randomsource' is a function returning n random bytes, default os.urandom
	"""

	if randomsource==None:
		randomsource=os.urandom

	token=randomsource(14)

	if len(token)!=14:
		raise ValueError("random source returned %i instead of 14 bytes"%
						len(token))

	return "nm_"+binascii.hexlify(token).decode("ascii")

