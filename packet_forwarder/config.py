import os

# Environment is expected to be loaded (load_dotenv) by the entry script
DEBUG = os.getenv('DEBUG', 'FALSE') == 'TRUE'

if os.getenv('LOCAL', None) == 'TRUE':
    HOME_DIR = '.'
else:
    HOME_DIR = os.getenv('PF_HOME_DIR', '/home/gateway')

# LOGGING Configuration
LOG_DIR = f'{HOME_DIR}/log'
LOG_FILENAME = "PacketForwarder.debug"
MAX_LOG_SIZE = 20 * 1024 * 1024  # 20Mb
BACKUP_COUNT = 10

# Fixture Configuration
FIXTURE_DIR = os.getenv('FIXTURE_DIR', './test_data')
