"""Constants shared by conftest and the test modules."""

PASSWORD = "correct horse"
SECRET = "test-secret"
