"""
Basic usage - Upload one file in a single request
"""
import asyncio
from chunkload import UploadClient


async def main():
    async with UploadClient() as client:

        # Register the file, then send it as one multipart/form-data POST
        handle = client.add_file("document.pdf")
        state = await client.upload(handle, "https://example.com/upload")

        print(f"Status: {state.status.value}")
        print(f"Server said: {state.response_body}")

        # Upload under another name
        handle = client.add_file("photo.jpg", target_name="vacation_2024.jpg")
        state = await client.upload(handle, "https://example.com/upload")
        print(f"Uploaded as {handle.upload_name}: {state.status.value}")


if __name__ == "__main__":
    asyncio.run(main())
