"""School Manager package.

Fee ledger, reporting and guardian notifications organised by feature modules
(fees, reports, sms, attendance, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
