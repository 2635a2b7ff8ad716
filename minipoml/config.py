import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Files loaded by <include> and <let src="...">
    # Unset means the working directory at the time a loader is created
    BASE_DIR = os.getenv('POML_BASE_DIR')
    FILE_ENCODING = os.getenv('POML_FILE_ENCODING', 'utf-8')

    # Include chains deeper than this fail instead of exhausting the stack
    MAX_INCLUDE_DEPTH = int(os.getenv('POML_MAX_INCLUDE_DEPTH', '16'))

    # Logging (CLI only, the library never installs handlers)
    LOG_LEVEL = os.getenv('POML_LOG_LEVEL', 'WARNING')


def get_config():
    return Config
