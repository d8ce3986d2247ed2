"""
docstream CLI

Commands:
- docstream id inspect - Decode a StreamID or CommitID
- docstream patch diff/apply - JSON patch between documents
- docstream replay - Replay a commit log into document state
"""
