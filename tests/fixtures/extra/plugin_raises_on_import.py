raise RuntimeError("broken plugin module")
