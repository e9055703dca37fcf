#!/usr/bin/env python3
"""
Maestro DMS Example - upload, register and poll a document

This example uploads a local file through a pre-signed POST, registers it
with DMS and prints its processing status and view information.
"""

import asyncio
import os
from pathlib import Path

from maestro_dms import DocumentService, DMSError


async def main():
    """Example usage of the DMS client."""

    directory = os.getenv("DMS_EXAMPLE_DIR", ".")
    filename = os.getenv("DMS_EXAMPLE_FILE", "example_document.pdf")

    if not Path(directory, filename).exists():
        print(f"File not found: {Path(directory, filename)}")
        print("Set DMS_EXAMPLE_DIR and DMS_EXAMPLE_FILE to a file you want to upload.")
        return

    # Credentials come from DMS_API_KEY (and optionally DMS_API_SECRET / DMS_CUSTOMER)
    async with DocumentService(logging=True) as dms:
        bucket = await dms.get_bucket()
        print(f"Bucket: {bucket}")

        upload = await dms.upload_file({"directory": directory, "filename": filename})
        print(f"Uploaded {upload.original_filename} as {upload.key}.{upload.file_extension}")

        content = await dms.register({
            "title": Path(filename).stem,
            "path": f"{upload.key}.{upload.file_extension}",
            "file_format": upload.file_extension,
            "should_generate_thumbnail": True,
        })
        print(f"Registered content: {content}")

        identity = content.get("identity") if isinstance(content, dict) else None
        if identity:
            print(f"Status: {await dms.status({'identity': identity})}")
            print(f"View: {await dms.view({'identity': identity})}")


if __name__ == "__main__":
    print("=" * 60)
    print("MAESTRO DMS CLIENT EXAMPLE")
    print("=" * 60)

    if not os.getenv("DMS_API_KEY"):
        print("Set DMS_API_KEY to run the example against DMS.")
    else:
        try:
            asyncio.run(main())
        except DMSError as e:
            print(f"Example failed: {e}")

    print("=" * 60)
