#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
from	.helpers		import to_bytes

#####################
#CLASS _MessageBuffer
#####################

class _MessageBuffer:
	"collects the chunks of a mail in the order they arrive"

	def __init__(self):
		self._chunks=[]
		self._length=0

	def __len__(self):
		return self._length

	#######
	#append
	#######

	def append(self,chunk,encoding="UTF-8"):
		"appends a chunk, strings are encoded with 'encoding' first"
		chunk=to_bytes(chunk,encoding)
		self._chunks.append(chunk)
		self._length+=len(chunk)

	#########
	#finalize
	#########

	def finalize(self):
		"returns the complete mail as bytes"
		return b"".join(self._chunks)

