"""
Chunked uploads - Progress, per-chunk responses and cancellation
"""
import asyncio
from chunkload import UploadClient, UploadSettings, CallbackEventSink


async def main():
    settings = UploadSettings(
        chunk_size=4 * 1024 * 1024,
        multipart_fixed_fields={'token': 'secret'},
    )

    async with UploadClient(settings=settings) as client:
        handle = client.add_file("large_file.zip")

        def on_progress(event):
            print(f"Progress: {event.percentage:.1f}%")

        def on_chunk(event):
            print(f"Chunk {event.chunk_index + 1}/{event.total_chunks}: {event.response_body}")
            # The server can ask us to give up
            if '"abort": true' in event.response_body:
                event.cancelled = True

        sink = CallbackEventSink(
            on_progress=on_progress,
            on_chunk_uploaded=on_chunk,
            on_error=lambda e: print(f"Failed ({e.code}): {e.message}"),
        )

        state = await client.upload(handle, "https://example.com/upload", sink=sink)
        print(f"Final: {state.status.value}")

        # Raw octet-stream chunks, form values go to the query string
        state = await client.upload(handle, "https://example.com/raw", multipart=False)
        print(f"Raw upload: {state.status.value}")


if __name__ == "__main__":
    asyncio.run(main())
