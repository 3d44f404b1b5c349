"""
L2 Resolver — turns the catalog and host state into a RunPlan.
"""
