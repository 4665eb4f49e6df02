#!/usr/bin/env python3
#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
import sys
import pgpmimefilter

sys.exit(pgpmimefilter.main(sys.argv[1:]))
