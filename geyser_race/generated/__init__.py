"""protoc output for the Yellowstone geyser and Jito shredstream services.

Regenerate with ``scripts/gen_protos.sh``.
"""
