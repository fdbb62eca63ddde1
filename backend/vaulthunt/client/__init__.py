"""Python client for the vault-hunt backend (player and admin sides)."""
from vaulthunt.client.admin import AdminSync
from vaulthunt.client.api import ApiClient
from vaulthunt.client.errors import (
    ActionFailed,
    ApiError,
    ClientError,
    NetworkError,
    PayloadError,
    RateLimitedError,
    RequestTimeout,
)
from vaulthunt.client.player import PlayerSync
from vaulthunt.client.polling import Backoff, PollingService
from vaulthunt.client.reconcile import merge_snapshot, merge_words
from vaulthunt.client.storage import ResumeStore

__all__ = [
    'ActionFailed', 'AdminSync', 'ApiClient', 'ApiError', 'Backoff', 'ClientError',
    'NetworkError', 'PayloadError', 'PlayerSync', 'PollingService', 'RateLimitedError',
    'RequestTimeout', 'ResumeStore', 'merge_snapshot', 'merge_words',
]
