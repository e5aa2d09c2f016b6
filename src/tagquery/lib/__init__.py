"""
# tagquery Core Library

This package contains the building blocks of tagquery: field annotations
(`tags`), the `Values` multi-map (`values`), the encoder itself (`encoder`),
URL helpers (`url`), the body codec registry (`codec`), and the shared
`Config` and `Logger` singletons the CLI depends on.
"""
