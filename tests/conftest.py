import os
import tempfile

# keep the attempt log out of the source tree while testing
os.environ.setdefault("PK_ATTEMPT_LOG", os.path.join(tempfile.gettempdir(), "packer_attempts_test.log"))
