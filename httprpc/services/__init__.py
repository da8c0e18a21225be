"""Services Layer — registry, descriptors, invocation and request dispatch.

Invariants:
    - Registry built once per contract, read-only afterwards
    - Dispatcher is transport neutral (RpcRequest in, RpcResponse out)
"""
