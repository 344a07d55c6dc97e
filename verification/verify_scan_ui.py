import io
from PIL import Image
from playwright.sync_api import expect, sync_playwright

def make_label_png() -> bytes:
    buffered = io.BytesIO()
    Image.new("RGB", (320, 200), (255, 255, 255)).save(buffered, format="PNG")
    return buffered.getvalue()

def verify_scan_ui():
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True)
        page = browser.new_page()

        try:
            print("Navigating to scanner...")
            page.goto("http://localhost:8080/")
            page.wait_for_load_state("networkidle")

            expect(page.get_by_text("Ingredient Scanner")).to_be_visible()
            expect(page.get_by_text("Tap to take a photo or upload an image")).to_be_visible()
            print("Upload area visible.")

            page.locator("input[type=file]").set_input_files(
                files=[{"name": "label.png", "mimeType": "image/png", "buffer": make_label_png()}]
            )
            expect(page.get_by_text("Analyze Ingredients")).to_be_visible()
            print("Preview visible.")

            page.get_by_text("Start Over").click()
            expect(page.get_by_text("Tap to take a photo or upload an image")).to_be_visible()
            print("Reset returns to upload area.")

            page.screenshot(path="verification/verification_scan_ui.png")
            print("Screenshot saved to verification/verification_scan_ui.png")

        except Exception as e:
            print(f"Error: {e}")
            page.screenshot(path="verification/error.png")
        finally:
            browser.close()

if __name__ == "__main__":
    verify_scan_ui()
