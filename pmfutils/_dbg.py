#License GPL v3
#Author Horst Knorr <gpgmailencrypt@gmx.de>
from   	functools			import wraps
import 	inspect
from	.					import child

#####
#_dbg
#####

def _dbg(func):
	"traces start and end of a method, when the owning pmf is in debug mode"

	@wraps(func)
	def wrapper(*args, **kwargs):
		parent=None
		lineno=0
		endlineno=0

		if args:

			if isinstance(args[0],child._pmfchild):
				parent=args[0]
			elif hasattr(args[0],"encrypt_mail"):
				parent=args[0]

		if isinstance(parent,child._pmfchild):
			owner=parent.parent
		else:
			owner=parent

		if (owner==None
		or not hasattr(owner,"is_debugging")
		or not owner.is_debugging()):
			return func(*args,**kwargs)

		filename=inspect.getfile(func)

		try:
			source=inspect.getsourcelines(func)
			lineno=source[1]
			endlineno=lineno+len(source[0])
		except (OSError,TypeError):
			pass

		owner._logger._level+=1
		parent.debug("START %s"%func.__name__,lineno,filename)

		try:
			return func(*args,**kwargs)
		finally:
			parent.debug("END %s"%func.__name__,endlineno,filename)
			owner._logger._level-=1

			if owner._logger._level<0:
				owner._logger._level=0

	return wrapper
