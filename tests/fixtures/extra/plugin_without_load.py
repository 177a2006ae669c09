NAME = "not-a-plugin"
