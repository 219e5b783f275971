from .resolve_value_set_component_rule_urls import optimize, optimize_url

__all__ = ["optimize", "optimize_url"]
