#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
"""
builds the OpenPGP/MIME (RFC 3156) messages.
The parts are written literally, no folding or transfer encoding is applied.
"""
from	.helpers		import crlf_text
from	.mailsplitter	import CRLF,join_headers

###########
#inner_part
###########

def inner_part(parsed):
	"""returns the content headers, an empty line and the body.
	These are the bytes, that will be signed or encrypted.
	"""

	if len(parsed.content_headers)==0:
		return CRLF+parsed.body

	return join_headers(parsed.content_headers)+CRLF+CRLF+parsed.body

##########
#_envelope
##########

def _envelope(parsed,protectionheaders):
	headers=[]
	envelope=join_headers(parsed.envelope_headers)

	if len(envelope)>0:
		headers.append(envelope)

	headers.extend(protectionheaders)
	return CRLF.join(headers)+CRLF+CRLF

#############
#build_signed
#############

def build_signed(parsed,signature,boundary):
	"""returns the multipart/signed mail with the detached 'signature'
	of inner_part(parsed)"""
	b=boundary.encode("ascii")
	header=_envelope(parsed,[
		b'Content-Type: multipart/signed; '
		b'protocol="application/pgp-signature"; micalg=pgp-sha512; '
		b'boundary="%s"'%b,
		b"Content-Description: OpenPGP signed message"])
	body=(	b"This is an OpenPGP/MIME signed message\r\n"
			b"\r\n"
			b"--%s\r\n"%b+
			inner_part(parsed)+
			b"\r\n"
			b"--%s\r\n"%b+
			b"Content-Type: application/pgp-signature; name=signature.asc\r\n"
			b"Content-Description: OpenPGP digital signature\r\n"
			b"Content-Disposition: attachment; filename=signature.asc\r\n"
			b"\r\n"+
			crlf_text(signature)+
			b"\r\n"
			b"--%s--\r\n"%b)
	return header+body

################
#build_encrypted
################

def build_encrypted(parsed,ciphertext,boundary):
	"""returns the multipart/encrypted mail, 'ciphertext' is the armored
	encrypted inner_part(parsed)"""
	b=boundary.encode("ascii")
	header=_envelope(parsed,[
		b'Content-Type: multipart/encrypted; '
		b'protocol="application/pgp-encrypted"; '
		b'boundary="%s"'%b,
		b"Content-Description: OpenPGP encrypted message",
		b"Content-Transfer-Encoding: 7bit"])
	body=(	b"This is an OpenPGP/MIME encrypted message\r\n"
			b"\r\n"
			b"--%s\r\n"%b+
			b"Content-Type: application/pgp-encrypted\r\n"
			b"Content-Transfer-Encoding: 7bit\r\n"
			b"\r\n"
			b"Version: 1\r\n"
			b"\r\n"
			b"--%s\r\n"%b+
			b"Content-Type: application/octet-stream; name=encrypted.asc\r\n"
			b"Content-Disposition: inline; filename=encrypted.asc\r\n"
			b"Content-Transfer-Encoding: 7bit\r\n"
			b"\r\n"+
			crlf_text(ciphertext)+
			b"\r\n"
			b"--%s--\r\n"%b)
	return header+body

