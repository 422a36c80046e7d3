"""
Service layer

Workflow rules kept out of the routers: stage tables, scoring, the audit
chain, the deletion workflow, CNPJ lookups, salary formatting and reports.
"""
