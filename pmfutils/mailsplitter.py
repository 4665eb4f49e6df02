#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
"""
splits a raw mail into the headers, that stay at the outer message, the
content headers, that move into the protected part, and the body
"""
from	collections		import namedtuple
import re

CRLF=b"\r\n"
_contentheader=re.compile(rb"^(content-type|content-transfer-encoding):",
						re.IGNORECASE)

ParsedMessage=namedtuple("ParsedMessage",["envelope_headers",
										"content_headers",
										"body"])

#################
#CLASS HeaderLine
#################

class HeaderLine(namedtuple("HeaderLine",["lines"])):
	"a logical header, 'lines' are the physical lines without line endings"
	__slots__=()

	@property
	def name(self):
		return self.lines[0].split(b":",1)[0].strip().decode("ascii","replace")

	@property
	def text(self):
		return CRLF.join(self.lines)

##############
#split_message
##############

def split_message(raw):
	"""returns the ParsedMessage of the bytes 'raw'.
	Everything before the first empty line is the header block, the rest is
	the body.
	"""
	splitmsg=raw.split(CRLF+CRLF,1)
	headerblock=splitmsg[0]

	if len(splitmsg)==2:
		body=splitmsg[1]
	else:
		body=b""

	envelope=[]
	content=[]
	lastheader=None

	for i,line in enumerate(headerblock.split(CRLF)):

		if i>0 and lastheader!=None and line[:1] in (b" ",b"\t"):
			lastheader.append(line)
			continue

		lastheader=[line]

		if _contentheader.match(line):
			content.append(lastheader)
		else:
			envelope.append(lastheader)

	return ParsedMessage(
			envelope_headers=tuple(HeaderLine(tuple(h)) for h in envelope),
			content_headers=tuple(HeaderLine(tuple(h)) for h in content),
			body=body)

#############
#join_headers
#############

def join_headers(headers):
	"returns the headers as bytes, every physical line ended by CRLF but the last"
	return CRLF.join(h.text for h in headers)

