"""
Integration Tests Package

End-to-end runs of StudioClient against an in-process stub of the
studio API, served through httpx.ASGITransport.

TEST AXIOMS:
=============
1. Reads are cached until a write invalidates them
2. Failures surface as typed errors, never silently
3. No test touches the network
"""
