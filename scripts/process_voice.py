import asyncio
import os
import sys
from uuid import uuid4

# Add project root to path so we can import voice_gateway
sys.path.append(os.getcwd())

from voice_gateway.controllers.dependencies import build_voice_pipeline
from voice_gateway.pipelines.voice import VoiceRequest


async def main():
    file_path = "sample.mp3"
    output_path = "reply.mp3"
    if len(sys.argv) > 1:
        file_path = sys.argv[1]
    if len(sys.argv) > 2:
        output_path = sys.argv[2]

    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found. Please provide a path to an MP3 file.")
        print("Usage: python scripts/process_voice.py [path/to/question.mp3] [reply.mp3]")
        return

    print(f"Reading {file_path}...")
    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    print(f"Running the voice pipeline on {len(audio_bytes)} bytes...")
    pipeline = build_voice_pipeline()
    result = await pipeline.run(VoiceRequest(audio_bytes=audio_bytes, request_id=uuid4().hex))

    if not result.ok:
        print(f"\nPipeline error [{result.error.stage.value}] {result.error.kind}: {result.error.message}")
        return

    print("\n--- Result ---")
    print(f"Language:   {result.detected_language}")
    print(f"Transcript: {result.transcript}")
    print(f"Reply:      {result.reply_text}")
    print(f"Spoken:     {result.spoken_text}")
    print(f"Voice:      {result.voice.provider.value}/{result.voice.voice_id}")
    print("--------------")

    with open(output_path, "wb") as f:
        f.write(result.audio_bytes)
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    asyncio.run(main())
