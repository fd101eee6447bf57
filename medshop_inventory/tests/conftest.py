import os
import tempfile
from pathlib import Path

# Keep settings.ini and log files out of the working tree
_test_dir = Path(tempfile.mkdtemp(prefix='medshop-tests-'))
_settings = _test_dir / 'settings.ini'
_settings.write_text(
    "[DATABASE]\n"
    "type = postgresql\n"
    "url = sqlite://\n"
    "\n"
    "[LOGGING]\n"
    "level = DEBUG\n"
    f"directory = {_test_dir / 'logs'}\n"
    "console_output = False\n"
    "file_output = False\n"
)
os.environ['MEDSHOP_CONFIG'] = str(_settings)
