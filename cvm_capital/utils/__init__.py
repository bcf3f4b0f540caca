"""Utility functions."""

from cvm_capital.utils.audit import get_client_ip, log_action
from cvm_capital.utils.money import percent_of, split_by_weights, split_evenly, to_money
from cvm_capital.utils.password import hash_password, verify_password

__all__ = [
    "hash_password",
    "verify_password",
    "log_action",
    "get_client_ip",
    "to_money",
    "percent_of",
    "split_by_weights",
    "split_evenly",
]
