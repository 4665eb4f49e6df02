#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
