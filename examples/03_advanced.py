"""
Advanced usage - Proxy, timeouts, batch uploads and an event queue
"""
import asyncio
from chunkload import (
    UploadClient,
    TransportConfig,
    TimeoutConfig,
    QueueEventSink,
    FileUploaded,
    UploadError,
)


async def main():
    # Custom configuration
    config = TransportConfig.with_proxy(
        "http://proxy.example.com:8080",
        timeout=TimeoutConfig(total=600),
        extra_headers={'Authorization': 'Bearer token'},
    )

    async with UploadClient(config=config) as client:
        # Same names in one batch are only added once
        handles = client.add_files(["a.log", "b.log", "logs/a.log"])

        sink = QueueEventSink()
        tasks = [
            client.start_upload(h, "https://example.com/upload", sink=sink, chunk_size=1024 * 1024)
            for h in handles
        ]

        # Give up on the second file after two seconds
        await asyncio.sleep(2)
        client.cancel(handles[1].id)

        finished = 0
        while finished < len(handles) - 1:
            event = await sink.queue.get()
            if isinstance(event, (FileUploaded, UploadError)):
                finished += 1
                print(event)

        for state in await asyncio.gather(*tasks):
            print(f"{state.file_id}: {state.status.value}")


if __name__ == "__main__":
    asyncio.run(main())
