#!/usr/bin/env python3
"""
Inspect a Stremio addon manifest the way the BFF sees it
"""
import asyncio
import json
import sys
from crumble.core.exceptions import ManifestFetchError
from crumble.services.loader import AddonLoader, build_descriptor
from crumble.services.registry import AddonRegistry
from crumble.services.transport import AddonTransport


async def inspect_addon(url: str) -> int:
    """Fetch, validate and summarize one addon"""

    transport = AddonTransport()
    loader = AddonLoader(AddonRegistry(), transport)

    try:
        report = await loader.validate(url)
    except ManifestFetchError as exc:
        print(f"Could not fetch manifest: {exc}")
        return 1
    finally:
        await transport.close()

    print(f"Transport URL: {report['url']}")
    print(f"Valid: {report['valid']}")
    for error in report["errors"]:
        print(f"  error: {error}")
    for warning in report["warnings"]:
        print(f"  warning: {warning}")

    if not report["valid"]:
        print("\nRaw manifest:")
        print(json.dumps(report["manifest"], indent=2)[:2000])
        return 1

    descriptor = build_descriptor(report["manifest"], report["url"])
    print(f"\n{descriptor.name} ({descriptor.id}) v{descriptor.version or '?'}")
    print(f"Resources: {', '.join(descriptor.resources)}")
    print(f"Types: {', '.join(descriptor.types)}")
    print(f"\nCatalogs ({len(descriptor.catalogs)}):")
    print("=" * 80)
    for catalog in descriptor.catalogs:
        search = " [search]" if catalog.supports_search else ""
        print(f"  {catalog.type}/{catalog.id}: {catalog.name}{search} extra={catalog.extra_params}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python inspect_addon.py <addon-url>")
        sys.exit(2)
    sys.exit(asyncio.run(inspect_addon(sys.argv[1])))
