"""
tests/test_wizard_images.py
Photo intake for the quote wizard: screening, compression, progress and upload.
Run: pytest tests/test_wizard_images.py -v
"""
from __future__ import annotations

import asyncio
import io

import httpx
from PIL import Image


def _png(width=64, height=48, color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def _file(name="kitchen.png", data=None, content_type=None):
    from quote_wizard.images import ImageFile

    return ImageFile(filename=name, data=data if data is not None else _png(), content_type=content_type)


class TestScreening:
    def test_rejects_unsupported_format(self):
        from quote_wizard.images import ImageIntake

        accepted, rejected = ImageIntake().screen([_file("plans.pdf"), _file("a.jpg")])
        assert [img.filename for img in accepted] == ["a.jpg"]
        assert rejected[0].filename == "plans.pdf"
        assert rejected[0].reason == "Only JPG, PNG, and HEIC images are accepted"

    def test_rejects_oversized_file(self):
        from quote_wizard.catalog import MAX_FILE_SIZE
        from quote_wizard.images import ImageIntake

        big = _file("big.jpg", data=b"\0" * MAX_FILE_SIZE)
        accepted, rejected = ImageIntake().screen([big])
        assert accepted == []
        assert rejected[0].reason == "File must be less than 10MB"

    def test_count_limit_includes_existing_images(self):
        from quote_wizard.images import ImageIntake

        files = [_file(f"p{i}.png") for i in range(4)]
        accepted, rejected = ImageIntake().screen(files, existing=8)
        assert len(accepted) == 2
        assert [r.filename for r in rejected] == ["p2.png", "p3.png"]
        assert rejected[0].reason == "Maximum 10 images allowed"

    def test_mime_type_accepted_without_extension(self):
        from quote_wizard.images import ImageIntake

        accepted, _ = ImageIntake().screen([_file("IMG_0001", content_type="image/jpeg")])
        assert accepted[0].content_type == "image/jpeg"

    def test_extension_is_case_insensitive(self):
        from quote_wizard.images import ImageIntake

        accepted, _ = ImageIntake().screen([_file("IMG_0001.HEIC")])
        assert accepted[0].content_type == "image/heic"


class TestCompression:
    def test_downscales_to_max_dimension(self):
        from quote_wizard.images import compress_image

        out = compress_image(_png(4000, 2000))
        with Image.open(io.BytesIO(out)) as img:
            assert img.format == "JPEG"
            assert max(img.size) == 1920
            assert img.size == (1920, 960)

    def test_small_images_are_not_upscaled(self):
        from quote_wizard.images import compress_image

        with Image.open(io.BytesIO(compress_image(_png(300, 200)))) as img:
            assert img.size == (300, 200)

    def test_transparent_png_becomes_rgb(self):
        from quote_wizard.images import compress_image

        buffer = io.BytesIO()
        Image.new("RGBA", (50, 50), (0, 0, 0, 0)).save(buffer, format="PNG")
        with Image.open(io.BytesIO(compress_image(buffer.getvalue()))) as img:
            assert img.mode == "RGB"


class TestProcessing:
    def test_progress_reaches_complete(self):
        from quote_wizard.images import ImageIntake, ImageStatus

        updates = []
        intake = ImageIntake(on_progress=lambda img: updates.append((img.status, img.progress)))
        accepted, rejected = asyncio.run(intake.process([_file()]))

        assert rejected == []
        image = accepted[0]
        assert image.status == ImageStatus.COMPLETE
        assert image.progress == 100
        assert image.content_type == "image/jpeg"
        assert image.data and image.size == len(image.data)
        assert updates[0] == (ImageStatus.COMPRESSING, 10)
        assert updates[-1] == (ImageStatus.COMPLETE, 100)
        progress = [p for _, p in updates]
        assert progress == sorted(progress)

    def test_heic_photo_is_decoded_and_compressed(self):
        from quote_wizard.images import ImageIntake, ImageStatus

        buffer = io.BytesIO()
        Image.new("RGB", (120, 80), (30, 90, 200)).save(buffer, format="HEIF")
        heic = _file("IMG_0042.HEIC", data=buffer.getvalue())

        accepted, rejected = asyncio.run(ImageIntake().process([heic]))

        assert rejected == []
        assert accepted[0].status == ImageStatus.COMPLETE
        assert accepted[0].content_type == "image/jpeg"
        with Image.open(io.BytesIO(accepted[0].data)) as img:
            assert img.format == "JPEG"
            assert img.size == (120, 80)

    def test_undecodable_file_fails_alone(self):
        from quote_wizard.images import ImageIntake, ImageStatus

        files = [_file("good.png"), _file("broken.jpg", data=b"not an image")]
        accepted, _ = asyncio.run(ImageIntake().process(files))
        by_name = {img.filename: img for img in accepted}
        assert by_name["good.png"].status == ImageStatus.COMPLETE
        assert by_name["broken.jpg"].status == ImageStatus.ERROR
        assert by_name["broken.jpg"].error == "Could not process this image"

    def test_upload_sets_reference(self):
        from quote_wizard.images import ImageIntake, ImageStatus, StorageUploader

        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"Key": "quote-images/x"})

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                uploader = StorageUploader(
                    base_url="https://proj.supabase.co", api_key="anon", bucket="quote-images",
                    http_client=http,
                )
                return await ImageIntake(uploader=uploader).process([_file("kitchen.png")])

        accepted, _ = asyncio.run(run())
        image = accepted[0]
        assert image.status == ImageStatus.COMPLETE
        assert image.reference.startswith("quotes/")
        assert image.reference.endswith("/kitchen.jpg")
        assert seen[0].url.path == f"/storage/v1/object/quote-images/{image.reference}"
        assert seen[0].headers["Content-Type"] == "image/jpeg"

    def test_upload_failure_marks_error(self):
        from quote_wizard.images import ImageIntake, ImageStatus, StorageUploader

        async def run():
            transport = httpx.MockTransport(lambda request: httpx.Response(403))
            async with httpx.AsyncClient(transport=transport) as http:
                uploader = StorageUploader(
                    base_url="https://proj.supabase.co", api_key="anon", http_client=http,
                )
                return await ImageIntake(uploader=uploader).process([_file()])

        accepted, _ = asyncio.run(run())
        assert accepted[0].status == ImageStatus.ERROR
        assert accepted[0].error == "Upload failed"
        assert accepted[0].reference is None


class TestWizardImages:
    def test_add_and_remove_images(self, tmp_path):
        from quote_wizard.draft_store import DraftStore
        from quote_wizard.state_machine import QuoteWizard

        wizard = QuoteWizard(store=DraftStore(tmp_path / "draft.json"))
        rejected = asyncio.run(wizard.add_images([_file("a.png"), _file("b.gif")]))
        assert [r.filename for r in rejected] == ["b.gif"]
        assert len(wizard.images) == 1
        assert wizard.remove_image(wizard.images[0].id)
        assert wizard.images == []
        assert not wizard.remove_image("missing")

    def test_only_uploaded_images_are_sent(self, tmp_path):
        from quote_wizard.draft_store import DraftStore
        from quote_wizard.images import ImageStatus, UploadedImage
        from quote_wizard.state_machine import QuoteWizard

        wizard = QuoteWizard(store=DraftStore(tmp_path / "draft.json"))
        wizard.images = [
            UploadedImage("a.jpg", 1, "image/jpeg", status=ImageStatus.COMPLETE, reference="quotes/a.jpg"),
            UploadedImage("b.jpg", 1, "image/jpeg", status=ImageStatus.ERROR),
            UploadedImage("c.jpg", 1, "image/jpeg", status=ImageStatus.COMPLETE),
        ]
        assert wizard.image_references() == ["quotes/a.jpg"]
