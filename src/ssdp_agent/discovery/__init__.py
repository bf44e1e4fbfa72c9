"""
SSDP discovery components for the agent.

parser         - stateless response parsing
cache          - thread-safe USN -> response cache
socket_manager - the bound multicast UDP socket
receive_loop   - background thread feeding the cache
query          - M-SEARCH request building and sending
network        - interface address lookup for multicast membership
"""
