#!/usr/bin/python3
import email,io,os,re,shutil,sys,tempfile,unittest
from contextlib import redirect_stdout
sys.path.insert(0,os.path.join(os.path.dirname(os.path.abspath(__file__)),".."))
from gpgtesthelper import GPG,MAIL,NOCONFIG,testkeys
import pgpmimefilter
from pgpmimefilter import CryptoOperationError,openpgp_encrypt,pmf

keys=None

def setUpModule():
	global keys

	if GPG:
		keys=testkeys()

def tearDownModule():

	if keys!=None:
		keys.close()

def signed_parts(mail):
	"returns the signed bytes and the signature of a multipart/signed mail"
	boundary=email.message_from_bytes(mail).get_boundary().encode("ascii")
	start=mail.index(b"--"+boundary+b"\r\n")+len(boundary)+4
	end=mail.index(b"\r\n--"+boundary+b"\r\n",start)
	signature=mail[mail.index(b"-----BEGIN PGP SIGNATURE-----"):
					mail.index(b"-----END PGP SIGNATURE-----")+27]
	return mail[start:end],signature

def ciphertext(mail):
	return mail[mail.index(b"-----BEGIN PGP MESSAGE-----"):
				mail.index(b"-----END PGP MESSAGE-----")+25]

#############
#filetestcase
#############

class filetestcase(unittest.TestCase):

	def setUp(self):
		self.dir=tempfile.mkdtemp(prefix="pmftest-")

	def tearDown(self):
		shutil.rmtree(self.dir,ignore_errors=True)

	def write(self,name,content):
		path=os.path.join(self.dir,name)
		mode="wb" if isinstance(content,bytes) else "w"

		with open(path,mode) as f:
			f.write(content)

		return path

	def read(self,name):

		with open(os.path.join(self.dir,name),"rb") as f:
			return f.read()

class pmftests(filetestcase):

	def test_configfile(self):
		keyfile=self.write("signer.asc","PRIVATE KEY")
		logfile=os.path.join(self.dir,"pmf.log")
		config=self.write("pmf.conf",
			"[default]\n"
			"sign = no\n"
			"signingkey = %s #the key\n"
			"passphrase = hello world\n"
			"[gpg]\n"
			"gpgcommand = /opt/gpg/bin/gpg\n"
			"minimumkeybits = 3072\n"
			"[logging]\n"
			"log = file\n"
			"file = %s\n"
			"debug = sometimes\n"%(keyfile,logfile))

		with pmf(NOCONFIG) as p:
			p.set_configfile(config)
			self.assertFalse(p.get_sign())
			self.assertEqual(p._SIGNINGKEY,"PRIVATE KEY")
			self.assertEqual(p._PASSPHRASE,"hello world")
			self.assertEqual(p._GPGCMD,"/opt/gpg/bin/gpg")
			self.assertEqual(p._MINIMUMKEYBITS,3072)
			self.assertEqual(p.get_logging(),"file")
			self.assertEqual(p.get_statistics()["systemwarnings"],1)

		with open(logfile) as f:
			self.assertIn("logging/debug has no boolean value",f.read())

	def test_missingkeyfile(self):
		config=self.write("pmf.conf","[default]\nsigningkey = %s\n"%
							os.path.join(self.dir,"missing.asc"))

		with pmf(NOCONFIG) as p:
			p.set_configfile(config)
			self.assertEqual(p._SIGNINGKEY,None)
			self.assertEqual(p.get_statistics()["systemerrors"],1)

	def test_passthrough(self):
		with pmf(NOCONFIG) as p:
			self.assertEqual(p.encrypt_mail(MAIL),MAIL.encode("UTF-8"))
			self.assertEqual(p.encrypt_mail(MAIL.encode("UTF-8"),sign=False),
							MAIL.encode("UTF-8"))
			s=p.get_statistics()
			self.assertEqual(s["total"],2)
			self.assertEqual(s["total unchanged"],2)
			self.assertEqual(s["total encrypt"],0)
			self.assertEqual(p._tempdirs,[])

	def test_handlerskip(self):
		"the handler doesn't touch mails without keys"
		with pmf(NOCONFIG) as p:
			handler=openpgp_encrypt(parent=p)
			self.assertEqual(handler(MAIL),MAIL.encode("UTF-8"))
			handler=openpgp_encrypt(signingkey="PRIVATE KEY",sign=False,parent=p)
			self.assertEqual(handler(MAIL,[]),MAIL.encode("UTF-8"))
			handler=openpgp_encrypt(signingkey="PRIVATE KEY",parent=p)
			self.assertEqual(handler(MAIL,sign=False),MAIL.encode("UTF-8"))
			self.assertEqual(p.get_statistics()["total"],0)

	def test_handlersignkeyword(self):
		"sign=False per mail overrides the signing key of the handler"
		handler=openpgp_encrypt(signingkey="PRIVATE KEY",configfile=NOCONFIG)
		self.assertEqual(handler(MAIL.encode("UTF-8"),[],sign=False),
						MAIL.encode("UTF-8"))
		self.assertEqual(handler(MAIL,None,False),MAIL.encode("UTF-8"))

	def test_debugmode(self):
		"methods keep working and are traced in debug mode"
		logfile=os.path.join(self.dir,"pmf.log")
		config=self.write("pmf.conf",
			"[logging]\n"
			"log = file\n"
			"file = %s\n"
			"debug = yes\n"%logfile)

		with pmf(config) as p:
			self.assertTrue(p.get_debug())
			self.assertEqual(p.encrypt_mail.__name__,"encrypt_mail")
			self.assertEqual(p.encrypt_mail(MAIL),MAIL.encode("UTF-8"))
			self.assertEqual(p.encrypter_factory().mode,None)

		with open(logfile) as f:
			log=f.read()

		self.assertIn("START encrypt_mail",log)
		self.assertIn("END encrypt_mail",log)
		self.assertIn("START finish",log)
		self.assertIn("content headers moved into the protected part: Content-Type",
					log)

	def test_constructorconfig(self):
		config=self.write("pmf.conf","[default]\nsign = no\n[gpg]\nminimumkeybits = 4096\n")

		with pmf(config) as p:
			self.assertFalse(p.get_sign())
			self.assertEqual(p._MINIMUMKEYBITS,4096)

	def test_configoption(self):
		"-c starts again from the built-in defaults"
		config=self.write("pmf.conf","[default]\nsign = no\npassphrase = pw\n")

		with pmf(config) as p:
			self.assertFalse(p.get_sign())
			p._parse_commandline(["-c",NOCONFIG])
			self.assertTrue(p.get_sign())
			self.assertEqual(p._PASSPHRASE,None)
			self.assertEqual(p._CONFIGFILE,NOCONFIG)

	def test_help(self):
		out=io.StringIO()

		with redirect_stdout(out):

			with self.assertRaises(SystemExit) as e:
				pgpmimefilter.main(["-c",NOCONFIG,"-h"])

		self.assertEqual(e.exception.code,0)
		self.assertIn("Copyright %s"%pgpmimefilter.COPYRIGHTYEAR,out.getvalue())

	def test_scriptpassthrough(self):
		infile=self.write("in.eml",MAIL.encode("UTF-8"))
		pgpmimefilter.main(["-c",NOCONFIG,"-f",infile,"-m",os.path.join(self.dir,"out.eml")])
		self.assertEqual(self.read("out.eml"),MAIL.encode("UTF-8"))

	def test_badoption(self):
		with self.assertRaises(SystemExit) as e:
			pgpmimefilter.main(["-c",NOCONFIG,"--bogus"])

		self.assertEqual(e.exception.code,2)

	def test_missinginputfile(self):
		with self.assertRaises(SystemExit) as e:
			pgpmimefilter.main(["-c",NOCONFIG,"-f",os.path.join(self.dir,"missing.eml")])

		self.assertEqual(e.exception.code,2)

	def test_exampleconfig(self):
		out=io.StringIO()

		with redirect_stdout(out):

			with self.assertRaises(SystemExit) as e:
				pgpmimefilter.main(["-c",NOCONFIG,"-x"])

		self.assertEqual(e.exception.code,0)
		self.assertIn("[gpg]",out.getvalue())
		self.assertIn("minimumkeybits",out.getvalue())

	def test_version(self):
		out=io.StringIO()

		with redirect_stdout(out):

			with self.assertRaises(SystemExit):
				pgpmimefilter.main(["-c",NOCONFIG,"--version"])

		self.assertIn(pgpmimefilter.VERSION,out.getvalue())

@unittest.skipUnless(GPG,"gpg is not installed")
class gpgmailtests(filetestcase):

	def test_encrypt(self):
		with pmf(NOCONFIG) as p:
			result=p.encrypt_mail(MAIL,[keys.recipient_public])
			s=p.get_statistics()

		self.assertTrue(result.startswith(b"From: a@x\r\nTo: b@x\r\nSubject: hi\r\n"
						b"Content-Type: multipart/encrypted;"))
		msg=email.message_from_bytes(result)
		self.assertRegex(msg.get_boundary(),"^nm_[0-9a-f]{28}$")
		self.assertIn(b"\r\n\r\nThis is an OpenPGP/MIME encrypted message\r\n",result)
		plaintext,status=keys.keyring.decrypt(ciphertext(result))
		self.assertEqual(plaintext,b"Content-Type: text/plain\r\n\r\nHello")
		self.assertEqual(s["total encrypt"],1)
		self.assertEqual(s["total sign"],0)

	def test_severalrecipients(self):
		with pmf(NOCONFIG) as p:
			result=p.encrypt_mail(MAIL,[keys.recipient_public,
										"garbage",
										keys.recipient2_public])
			self.assertEqual(p.get_statistics()["systemwarnings"],1)

		plaintext,status=keys.keyring.decrypt(ciphertext(result))
		self.assertEqual(plaintext,b"Content-Type: text/plain\r\n\r\nHello")

	def test_sign(self):
		with pmf(NOCONFIG) as p:
			p.set_signingkey(keys.signer_secret,"hello world")
			result=p.encrypt_mail(MAIL)
			self.assertEqual(p.get_statistics()["total sign"],1)

		msg=email.message_from_bytes(result)
		self.assertEqual(msg.get_content_type(),"multipart/signed")
		self.assertEqual(msg.get_param("micalg"),"pgp-sha512")
		content,signature=signed_parts(result)
		self.assertEqual(content,b"Content-Type: text/plain\r\n\r\nHello")
		self.assertTrue(keys.keyring.verify(signature,content))

	def test_encryptsign(self):
		with pmf(NOCONFIG) as p:
			p.set_signingkey(keys.signer_secret,"hello world")
			result=p.encrypt_mail(MAIL,[keys.recipient_public])
			s=p.get_statistics()

		self.assertEqual(s["total encrypt"],1)
		self.assertEqual(s["total sign"],1)
		plaintext,status=keys.keyring.decrypt(ciphertext(result))
		self.assertEqual(plaintext,b"Content-Type: text/plain\r\n\r\nHello")
		self.assertIn("VALIDSIG",status)

	def test_wrongpassphrase(self):
		with pmf(NOCONFIG) as p:
			p.set_signingkey(keys.signer_secret,"wrong")
			self.assertEqual(p.encrypt_mail(MAIL),MAIL.encode("UTF-8"))
			result=p.encrypt_mail(MAIL,[keys.recipient_public])
			s=p.get_statistics()

		self.assertEqual(s["total unchanged"],1)
		self.assertEqual(s["total sign"],0)
		plaintext,status=keys.keyring.decrypt(ciphertext(result))
		self.assertNotIn("VALIDSIG",status)

	def test_nosign(self):
		with pmf(NOCONFIG) as p:
			p.set_signingkey(keys.signer_secret,"hello world")
			self.assertEqual(p.encrypt_mail(MAIL,sign=False),MAIL.encode("UTF-8"))

	def test_weakkey(self):
		with pmf(NOCONFIG) as p:

			with self.assertRaisesRegex(CryptoOperationError,"too weak"):
				p.encrypt_mail(MAIL,[keys.weak_public])

			self.assertEqual(p.get_statistics()["total failed"],1)
			self.assertEqual(p._tempdirs,[])

	def test_handler(self):
		handler=openpgp_encrypt(signingkey=keys.signer_secret,
								passphrase="hello world",
								configfile=NOCONFIG)
		result=handler(MAIL,keys.recipient_public)
		plaintext,status=keys.keyring.decrypt(ciphertext(result))
		self.assertEqual(plaintext,b"Content-Type: text/plain\r\n\r\nHello")
		self.assertIn("VALIDSIG",status)
		self.assertTrue(re.search(b"^Subject: hi\r$",result,re.M))

	def test_script(self):
		infile=self.write("in.eml",MAIL.encode("UTF-8"))
		keyfile=self.write("recipient.asc",keys.recipient_public)
		pgpmimefilter.main(["-c",NOCONFIG,"-f",infile,"-m",os.path.join(self.dir,"out.eml"),
							"-k",keyfile,"-n"])
		result=self.read("out.eml")
		self.assertEqual(email.message_from_bytes(result).get_content_type(),
						"multipart/encrypted")
		plaintext,status=keys.keyring.decrypt(ciphertext(result))
		self.assertEqual(plaintext,b"Content-Type: text/plain\r\n\r\nHello")

	def test_scriptweakkey(self):
		infile=self.write("in.eml",MAIL.encode("UTF-8"))
		keyfile=self.write("weak.asc",keys.weak_secret)

		with self.assertRaises(SystemExit) as e:
			pgpmimefilter.main(["-c",NOCONFIG,"-f",infile,"-m",os.path.join(self.dir,"out.eml"),
								"-s",keyfile,"-p",""])

		self.assertEqual(e.exception.code,3)
		self.assertFalse(os.path.exists(os.path.join(self.dir,"out.eml")))

if __name__ == '__main__':
    unittest.main()
