"""TypeProof: certificates that show a document was typed, not pasted.

Writing telemetry (keystrokes, pauses, pastes, snapshots) is canonicalized and
hashed into a self-contained certificate that anyone can re-verify offline.
The hash is unkeyed, so it detects corruption, not deliberate forgery.
"""

__version__ = "1.0.0"
