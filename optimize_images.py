import asyncio
import logging
import os
import sys
from dotenv import load_dotenv

from PIL import Image

logger = logging.getLogger(__name__)

# Optimisation settings
MAX_SIZE = (800, 800)
QUALITY = 80
TARGET_FORMAT = "WEBP"


def optimize_image(file_path: str) -> str:
    """
    Shrinks an image to fit MAX_SIZE and re-encodes it as WebP next to the
    original, which is removed. Returns the new path with forward slashes.
    Raises OSError when the file is not a readable image and
    Image.DecompressionBombError when its pixel count is absurd.
    """
    if file_path.lower().endswith('.webp'):
        return file_path.replace("\\", "/")

    with Image.open(file_path) as img:
        if img.mode in ("RGBA", "P"):
            img = img.convert("RGB")
        img.thumbnail(MAX_SIZE)

        directory = os.path.dirname(file_path)
        filename_no_ext = os.path.splitext(os.path.basename(file_path))[0]
        new_file_path = os.path.join(directory, f"{filename_no_ext}.webp")
        img.save(new_file_path, format=TARGET_FORMAT, quality=QUALITY, optimize=True)

    if new_file_path != file_path:
        try:
            os.remove(file_path)
        except OSError as e:
            logger.warning(f"Could not remove the original image {file_path}: {e}")

    return new_file_path.replace("\\", "/")


async def optimize_existing_images():
    """Converts every stored menu item photo that is not WebP yet."""
    from sqlalchemy import select
    from models import async_session_maker, MenuItem

    async with async_session_maker() as session:
        result = await session.execute(select(MenuItem).where(MenuItem.image_url.is_not(None)))
        items = result.scalars().all()

        logger.info(f"Found {len(items)} menu items with photos.")

        optimized_count = 0
        skipped = 0
        errors = 0

        for item in items:
            current_file_path = item.image_url.replace("\\", "/").lstrip("/")
            if not os.path.exists(current_file_path):
                logger.warning(f"File not found for '{item.name}': {item.image_url}")
                continue
            if current_file_path.lower().endswith('.webp'):
                skipped += 1
                continue
            try:
                item.image_url = "/" + optimize_image(current_file_path)
                optimized_count += 1
                logger.info(f"Optimized: {item.name}")
            except (OSError, Image.DecompressionBombError) as e:
                errors += 1
                logger.error(f"Failed to process '{item.name}': {e}")

        await session.commit()

        logger.info(f"Done. Optimized: {optimized_count}, already WebP: {skipped}, errors: {errors}")


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, stream=sys.stdout)
    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(optimize_existing_images())
