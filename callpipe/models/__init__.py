from .recording import Recording
from .device import CallerDevice, Project
# base and mixins are imported by the above as needed
