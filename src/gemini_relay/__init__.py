"""
Gemini prompt relay package.

Provides:
- A single prompt relay handler (passthrough or templated summary prompt)
- HTTP serving via FastAPI, plus an AWS Lambda adapter
- A command-line runner for one-off prompts
"""
