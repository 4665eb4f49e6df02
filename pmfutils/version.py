#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
VERSION="1.0.0"
DATE="17.10.2026"
COPYRIGHTYEAR="2026"
