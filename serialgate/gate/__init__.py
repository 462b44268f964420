from .models import (
    GateRun as GateRun,
    RunStatus as RunStatus,
)
from .serial_gate import SerialGate as SerialGate
