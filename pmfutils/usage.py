#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
from   .version			import *

###########
#show_usage
###########

def show_usage():
	"shows the command line options to stdout"
	print ("pgpmimefilter")
	print ("=============")
	print ("License: GPL 3")
	print ("Copyright %s Horst Knorr"%COPYRIGHTYEAR)
	print ("Version: %s from %s"%(VERSION,DATE))
	print ("\nUsage:\n")
	print ("pgpmimefilter.py [options] < Inputfile_from_stdin")
	print ("or")
	print ("pgpmimefilter.py -f inputfile.eml [options]")
	print ("\nOptions:\n")
	print ("-c f --config f:    use configfile 'f'. Default is")
	print ("                    /etc/pgpmimefilter.conf")
	print ("-f mail :           reads email file 'mail', otherwise from stdin")
	print ("-h --help :         print this help")
	print ("-k f --key f:       encrypt for the armored public key in file 'f'")
	print ("                    can be used several times")
	print ("-l t --log t:       print information into _logfile, with valid")
	print ("                    types 't' 'none','stderr','syslog','file'")
	print ("-m mailfile :       write email file to 'mailfile', otherwise")
	print ("                    email will be written to stdout")
	print ("-n --nosign:        don't sign the email")
	print ("-p pw --passphrase pw: passphrase of the signing key")
	print ("-s f --signingkey f: sign with the armored private key in file 'f'")
	print ("-x --example:       print example config file")
	print ("-v --verbose:       print debugging information into _logfile")
	print ("--version:          print the version")
	print ("")

####################
#print_exampleconfig
####################

def print_exampleconfig():
	"prints an example config file to stdout"
	space=56

	print ("[default]")
	print ("sign = yes".ljust(space)+
	"#sign mails, if a signing key is available")
	print ("signingkey =".ljust(space)+
	"#file with the armored private key used for signing")
	print ("passphrase =".ljust(space)+
	"#passphrase of the signing key")
	print ("")
	print ("[gpg]")
	print ("gpgcommand = /usr/bin/gpg")
	print ("minimumkeybits = 2047".ljust(space)+
	"#rsa, dsa and elgamal keys with less bits are refused")
	print ("")
	print ("[logging]")
	print ("log=none".ljust(space)+
	"#valid values are 'none', 'syslog', 'file' or 'stderr'")
	print ("file = /tmp/pgpmimefilter.log")
	print ("debug = no")

