"""Authorization resources.

This package ships model.conf, the default RBAC model used by
policy_store.core.container.init_enforcer.
"""
