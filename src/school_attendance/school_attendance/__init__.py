"""School attendance package.

Organized by feature modules (policies, holidays, attendance, reports,
reconciliation) with a thin Flask controller layer over service/repository
layers.
"""
