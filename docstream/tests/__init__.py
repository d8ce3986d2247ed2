"""
Test suite for docstream.

Focus areas:
- Identifier encoding
- Commit envelopes and signatures
- Patch engine
- Reducer validation and determinism
- Replay chain integrity
"""
