"""
Endpoint Dependencies
Resolve the components wired by the app factory
"""
from fastapi import Request
from crumble.services.addons import AddonManager
from crumble.services.aggregator import AddonAggregator
from crumble.services.cache import AddonCache
from crumble.services.fallback import FallbackProvider
from crumble.services.loader import AddonLoader
from crumble.services.normalizer import ResponseNormalizer
from crumble.services.registry import AddonRegistry


def get_registry(request: Request) -> AddonRegistry:
    return request.app.state.registry


def get_cache(request: Request) -> AddonCache:
    return request.app.state.cache


def get_loader(request: Request) -> AddonLoader:
    return request.app.state.loader


def get_aggregator(request: Request) -> AddonAggregator:
    return request.app.state.aggregator


def get_fallback(request: Request) -> FallbackProvider:
    return request.app.state.fallback


def get_normalizer(request: Request) -> ResponseNormalizer:
    return request.app.state.normalizer


def get_manager(request: Request) -> AddonManager:
    return request.app.state.manager
