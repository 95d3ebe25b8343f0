"""
Configuration module for the voice bridge.

Key components:
- constants: Protocol event names, audio format and tool defaults shared by the
  telephony and voice model sides of the bridge.
- logging_config: Console and rotating file logging for the application logger.
- settings: Environment-driven deployment settings (credentials, model, CRM API).

Usage examples:
```python
from voice_bridge.config.logging_config import configure_logging
from voice_bridge.config.settings import load_settings

logger = configure_logging()
settings = load_settings()
logger.info(f"Using model {settings.realtime_model}")
```
"""
