from nicegui import ui, events
import inspect
import logging
import time
import uuid

from src.services.capture import capture, capture_data_url, InvalidInput
# Import the module, not the instance, so tests can swap the service
from src.services import ingredient_api
from src.ui.viewmodels import ScannerState, InvalidTransition, GENERIC_ERROR_MESSAGE, build_results_view

logger = logging.getLogger(__name__)

JS_CAMERA_CODE = """
<script>
window.scannerVideo = null;
window.scannerStream = null;

async function startCamera() {
    window.scannerVideo = document.getElementById('scanner-video');
    if (!window.scannerVideo) return false;
    if (window.scannerStream) stopCamera();

    try {
        window.scannerStream = await navigator.mediaDevices.getUserMedia({
            video: { facingMode: 'environment', width: { ideal: 1920 }, height: { ideal: 1080 } }
        });
        window.scannerVideo.srcObject = window.scannerStream;
        await window.scannerVideo.play();
        return true;
    } catch (err) {
        console.error("Error accessing camera:", err);
        return false;
    }
}

function stopCamera() {
    if (window.scannerStream) {
        window.scannerStream.getTracks().forEach(track => track.stop());
        window.scannerStream = null;
    }
    if (window.scannerVideo) {
        window.scannerVideo.srcObject = null;
    }
}

function captureSingleFrame() {
    const video = window.scannerVideo;
    if (!video || !window.scannerStream || !video.videoWidth) return null;
    const canvas = document.createElement('canvas');
    canvas.width = video.videoWidth;
    canvas.height = video.videoHeight;
    canvas.getContext('2d').drawImage(video, 0, 0);
    return canvas.toDataURL('image/jpeg', 0.9);
}
</script>
"""

class ScanPage:
    def __init__(self):
        self.state = ScannerState()
        self.camera_active = False

    def refresh(self):
        self.render_scanner.refresh()
        self.render_results.refresh()

    async def handle_upload(self, e: events.UploadEventArguments):
        try:
            # Handle NiceGUI version differences
            file_obj = getattr(e, 'content', getattr(e, 'file', None))
            if not file_obj:
                raise InvalidInput("No file content found in event")

            content = file_obj.read()
            if inspect.isawaitable(content):
                content = await content

            filename = getattr(e, 'name', None) or getattr(file_obj, 'name', None) or "upload.jpg"
            image = capture(content, filename=filename)
        except InvalidInput as err:
            # Nothing usable was selected; leave the view untouched
            logger.warning(f"Ignoring upload: {err}")
            return

        self.state = self.state.captured(image)
        self.refresh()

    async def start_camera(self):
        try:
            started = await ui.run_javascript('startCamera()', timeout=10.0)
        except TimeoutError:
            started = False
        if not started:
            ui.notify("Camera not available", type='warning')
            return
        self.camera_active = True

    async def stop_camera(self):
        # Visibility is bound, so no refresh: re-rendering would drop the video stream
        await ui.run_javascript('stopCamera()')
        self.camera_active = False

    async def handle_camera_capture(self):
        data_url = await ui.run_javascript('captureSingleFrame()')
        if not data_url:
            ui.notify("Camera not active or ready", type='warning')
            return

        fname = f"capture_{int(time.time())}_{uuid.uuid4().hex[:6]}.jpg"
        try:
            image = capture_data_url(data_url, filename=fname)
        except InvalidInput as err:
            logger.warning(f"Ignoring camera frame: {err}")
            return

        await self.stop_camera()
        self.state = self.state.captured(image)
        self.refresh()

    async def analyze(self):
        try:
            self.state = self.state.start_analysis()
        except InvalidTransition as err:
            logger.warning(f"Analyze ignored: {err}")
            return

        generation = self.state.generation
        image = self.state.image
        self.refresh()

        try:
            result = await ingredient_api.ingredient_service.analyze(image)
        except Exception as err:
            logger.error(f"Error analyzing image ({type(err).__name__}): {err}")
            self.state = self.state.analysis_failed(generation, GENERIC_ERROR_MESSAGE)
        else:
            self.state = self.state.analysis_succeeded(generation, result)
        self.refresh()

    async def reset(self):
        if self.camera_active:
            await self.stop_camera()
        self.state = self.state.reset()
        self.refresh()

    @ui.refreshable
    def render_scanner(self):
        state = self.state
        with ui.card().classes('w-full rounded-3xl shadow-2xl p-6 mb-4 bg-white'):
            if not state.has_image:
                self.render_upload_area()
                return

            ui.image(state.image.data_url).props('alt="Captured ingredient label"').classes('w-full rounded-xl mb-4 shadow-md')

            if state.can_analyze:
                ui.button('Analyze Ingredients', on_click=self.analyze).classes('w-full py-4 text-lg font-semibold').props('color=deep-purple')

            if state.is_analyzing:
                with ui.column().classes('w-full items-center py-8'):
                    ui.spinner(size='xl', color='deep-purple')
                    ui.label("Analyzing your image...").classes('text-gray-600')

            if state.show_error:
                ui.label(state.error).classes('w-full bg-red-50 border border-red-200 text-red-700 px-4 py-3 rounded-xl mb-4')

            if not state.show_results:
                ui.button('Start Over', icon='restart_alt', on_click=self.reset).props('flat color=deep-purple').classes('w-full mt-2')

    def render_upload_area(self):
        with ui.column().classes('w-full items-center border-4 border-dashed border-purple-400 rounded-2xl p-8 bg-purple-50 gap-2'):
            ui.icon('photo_camera', color='deep-purple').classes('text-6xl')
            ui.label("Tap to take a photo or upload an image").classes('text-purple-600 text-lg font-semibold text-center')
            ui.label("Point your camera at ingredient labels").classes('text-gray-500 text-sm')
            ui.upload(on_upload=self.handle_upload, auto_upload=True, max_files=1) \
                .props('accept=image/* capture=environment flat bordered color=deep-purple label="Choose image"') \
                .classes('w-full max-w-sm')

        # Live camera, for desktops without a capture-capable file picker
        with ui.column().classes('w-full mt-4 gap-2'):
            with ui.element('div').classes('w-full aspect-video bg-black rounded-xl overflow-hidden').bind_visibility_from(self, 'camera_active'):
                ui.html('<video id="scanner-video" autoplay playsinline muted style="width: 100%; height: 100%; object-fit: contain;"></video>', sanitize=False)
            with ui.row().classes('w-full gap-2').bind_visibility_from(self, 'camera_active'):
                ui.button('Capture', icon='camera_alt', on_click=self.handle_camera_capture).classes('flex-grow').props('color=deep-purple')
                ui.button('Stop', icon='videocam_off', on_click=self.stop_camera).props('flat color=negative')
            ui.button('Use Live Camera', icon='videocam', on_click=self.start_camera).props('flat color=deep-purple').classes('w-full') \
                .bind_visibility_from(self, 'camera_active', backward=lambda active: not active)

    @ui.refreshable
    def render_results(self):
        self.render_results_card()

    def render_results_card(self):
        state = self.state
        if not state.show_results:
            return

        view = build_results_view(state.result)
        with ui.card().classes('w-full rounded-3xl shadow-2xl p-6 bg-white'):
            ui.label("Simplified Ingredients").classes('text-2xl font-bold text-gray-800 mb-4')

            if view.banner:
                with ui.element('div').classes('w-full bg-purple-50 border-l-4 border-purple-500 p-4 rounded-lg'):
                    ui.label(view.banner).classes('text-gray-700')
            else:
                with ui.column().classes('w-full gap-3'):
                    for entry in view.entries:
                        with ui.element('div').classes('w-full bg-purple-50 border-l-4 border-purple-500 p-4 rounded-lg'):
                            ui.label(entry.name).classes('font-semibold text-gray-800 mb-1')
                            ui.label(entry.explanation).classes('text-gray-600 text-sm leading-relaxed')

            ui.button('Scan Another Product', icon='restart_alt', on_click=self.reset) \
                .props('outline color=deep-purple').classes('w-full mt-4 font-semibold')

def scan_page():
    page = ScanPage()

    ui.add_head_html(JS_CAMERA_CODE)
    ui.query('body').classes('bg-gradient-to-br from-purple-600 to-indigo-700')

    with ui.column().classes('w-full max-w-2xl mx-auto p-4'):
        with ui.column().classes('w-full items-center text-white mb-8 pt-6 gap-1'):
            ui.label("🔍 Ingredient Scanner").classes('text-4xl font-bold')
            ui.label("Snap, scan, and simplify ingredients").classes('text-lg opacity-90')

        page.render_scanner()
        page.render_results()

    return page
