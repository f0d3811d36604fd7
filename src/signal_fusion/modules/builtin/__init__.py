"""Import all built-in modules to trigger @register decorators."""

from signal_fusion.modules.builtin import candles  # noqa: F401
from signal_fusion.modules.builtin import oscillator  # noqa: F401
from signal_fusion.modules.builtin import poi  # noqa: F401
from signal_fusion.modules.builtin import trend  # noqa: F401
from signal_fusion.modules.builtin import volume  # noqa: F401
