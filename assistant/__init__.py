"""
Voice assistant session core.

Modules:
  assistant.controller       — LifecycleController (the state machine front-ends drive)
  assistant.model_loader     — speech model loading with progress
  assistant.recording        — microphone sessions and device release
  assistant.transcription    — audio unit → text
  assistant.response_client  — text → /api/chat → cleaned reply
  assistant.speech           — reply → host voice
  assistant.capabilities     — injected host interfaces
  assistant.devices          — sounddevice microphone
  assistant.http_client      — requests HTTP client
  assistant.console          — text front-end (voice-assistant)
"""
