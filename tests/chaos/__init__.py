"""
Fault-injection scenarios.

End-to-end trials that combine a workload, a failpoint and a simulated
database whose safeguards react to the injected corruption.
"""
