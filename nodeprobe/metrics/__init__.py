"""In-process metric recording, a test double and Prometheus text parsing."""