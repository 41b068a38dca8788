from .commons import *
from .encoding import *
from .padding import *
from .keys import *
from .symmetric import *
from .asymmetric import *
