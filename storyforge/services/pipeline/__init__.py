"""
Pipeline - from a project row to a narrated Ken Burns video

Submodules:
- script: narration text, image prompts, prosody and animation plans
- audio / images: provider engines behind capability interfaces
- media: image and audio branches plus timing assignment
- rendering: per-scene clips and final assembly
- subtitles: SRT in word or scene mode
- preconditions / stages / orchestrator: resumable stage driver
"""
