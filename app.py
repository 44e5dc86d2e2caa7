import io
import json
import logging
import time

from flask import Flask, abort, jsonify, request, send_file

from config import IMAGE_MODELS, DEFAULT_IMAGE_MODEL, LOG_LEVEL, PORT
from errors import DecodeError, FloorBusyError, ReadError
from floor_state import FloorController
from image_utils import PREVIEW_MIME_TYPES, ImageFile, parse_data_url, read_upload

logger = logging.getLogger(__name__)

app = Flask(__name__)

controller = FloorController()


def is_image_type(mime_type):
    return bool(mime_type) and mime_type.startswith("image/")


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}
    return data


@app.route("/")
def index():
    return HTML_PAGE.replace(
        "/*__IMAGE_MODELS__*/",
        json.dumps(IMAGE_MODELS),
    )


@app.route("/api/floor", methods=["GET"])
def get_floor():
    return jsonify(controller.state.to_dict())


@app.route("/api/floor/select", methods=["POST"])
def floor_select():
    """Accept one floor plan, as a multipart file or a JSON data URL."""
    try:
        if "file" in request.files:
            upload = request.files["file"]
            mime = upload.mimetype
            if not is_image_type(mime):
                return jsonify({"error": "Please select an image file."}), 415
            image = read_upload(upload.stream, upload.filename, mime)
        else:
            data = json_body()
            image_data = data.get("image_data", "")
            if not image_data:
                return jsonify({"error": "No image provided"}), 400
            mime, raw_bytes = parse_data_url(image_data)
            if not is_image_type(mime):
                return jsonify({"error": "Please select an image file."}), 415
            image = ImageFile(
                filename=str(data.get("filename") or "floor-plan"),
                mime_type=mime,
                data=raw_bytes,
            )
    except (ReadError, DecodeError) as e:
        logger.warning("Rejected upload: %s", e)
        return jsonify({"error": str(e)}), 400

    try:
        floor = controller.select_input(image)
    except FloorBusyError as e:
        return jsonify({"error": str(e), "floor": controller.state.to_dict()}), 409
    return jsonify({"floor": floor.to_dict()})


@app.route("/api/floor/generate", methods=["POST"])
def floor_generate():
    data = json_body()
    model = data.get("model", DEFAULT_IMAGE_MODEL)

    if model not in IMAGE_MODELS:
        return jsonify({"error": f"Unknown model: {model}"}), 400

    start = time.time()
    try:
        floor = controller.generate(model)
    except FloorBusyError as e:
        return jsonify({"error": str(e), "floor": controller.state.to_dict()}), 409
    elapsed = round(time.time() - start, 1)

    body = {"floor": floor.to_dict(), "elapsed": elapsed}
    if floor.original_image is None:
        return jsonify({**body, "error": floor.error}), 400
    if floor.error:
        return jsonify({**body, "error": floor.error}), 502
    return jsonify(body)


@app.route("/previews/<token>")
def preview(token):
    image = controller.previews.get(token)
    if image is None:
        abort(404)
    # Anything but a plain raster image (e.g. SVG) is downloaded, never rendered.
    response = send_file(
        io.BytesIO(image.data),
        mimetype=image.mime_type,
        as_attachment=image.mime_type not in PREVIEW_MIME_TYPES,
        download_name=image.filename,
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


HTML_PAGE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Architectural 3D Visualizer</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: #0f0f0f;
    color: #e0e0e0;
    min-height: 100vh;
    padding: 32px;
  }

  header { text-align: center; margin-bottom: 28px; }
  header h1 { font-size: 2rem; font-weight: 700; color: #fff; }
  header p { margin-top: 8px; color: #9ca3af; }

  .controls {
    display: flex;
    gap: 10px;
    justify-content: flex-end;
    align-items: center;
    margin-bottom: 16px;
  }

  select {
    background: #1a1a1a;
    color: #e0e0e0;
    border: 1px solid #2a2a2a;
    border-radius: 8px;
    padding: 8px 12px;
    font-size: 0.82rem;
    outline: none;
  }
  select:hover, select:focus { border-color: #14b8a6; }

  button {
    background: linear-gradient(90deg, #14b8a6, #0891b2);
    color: #fff;
    border: none;
    border-radius: 8px;
    padding: 10px 20px;
    font-size: 0.85rem;
    font-weight: 500;
    cursor: pointer;
  }
  button:disabled { opacity: 0.5; cursor: not-allowed; }

  .error {
    display: none;
    background: rgba(127, 29, 29, 0.5);
    border: 1px solid #ef4444;
    color: #fca5a5;
    padding: 12px;
    border-radius: 6px;
    margin-bottom: 16px;
    font-size: 0.85rem;
  }
  .error.visible { display: block; }

  .panels { display: flex; gap: 24px; }

  .panel {
    flex: 1;
    aspect-ratio: 1;
    background: #1a1a1a;
    border-radius: 10px;
    display: flex;
    flex-direction: column;
    align-items: center;
    padding: 16px;
  }
  .panel h3 { font-size: 1rem; color: #9ca3af; margin-bottom: 12px; }

  .panel-body {
    flex: 1;
    width: 100%;
    background: rgba(0, 0, 0, 0.2);
    border-radius: 6px;
    display: flex;
    align-items: center;
    justify-content: center;
    overflow: hidden;
    color: #6b7280;
  }
  .panel-body img { width: 100%; height: 100%; object-fit: contain; }

  .dropzone {
    border: 2px dashed #374151;
    cursor: pointer;
    flex-direction: column;
    text-align: center;
    transition: border-color 0.2s;
  }
  .dropzone:hover, .dropzone.over { border-color: #14b8a6; }
  .dropzone.disabled { cursor: not-allowed; opacity: 0.5; }

  .spinner {
    width: 28px;
    height: 28px;
    border: 3px solid #2a2a2a;
    border-top-color: #14b8a6;
    border-radius: 50%;
    animation: spin 0.8s linear infinite;
    margin-bottom: 12px;
  }
  @keyframes spin { to { transform: rotate(360deg); } }

  .status { font-size: 0.78rem; color: #6b7280; margin-top: 12px; text-align: right; }
  .timer { color: #14b8a6; }
</style>
</head>
<body>

<header>
  <h1>Architectural 3D Visualizer</h1>
  <p>Upload your 2D floor plan to generate a 3D isometric rendering.</p>
</header>

<div class="controls">
  <select id="model"></select>
  <button id="generateBtn" onclick="generate()" disabled>Generate 3D View</button>
</div>

<div id="error" class="error"></div>

<div class="panels">
  <div class="panel">
    <h3>2D Blueprint</h3>
    <label id="dropzone" class="panel-body dropzone">
      <input id="fileInput" type="file" accept="image/*" hidden>
      <span>Upload 2D Floor Plan</span>
      <span style="font-size: 0.8rem; margin-top: 6px;">Drag &amp; drop or click to select a file</span>
    </label>
  </div>
  <div class="panel">
    <h3>3D Rendering</h3>
    <div id="result" class="panel-body">No image available</div>
  </div>
</div>

<div id="status" class="status"></div>

<script>
  const IMAGE_MODELS = /*__IMAGE_MODELS__*/;

  const modelEl = document.getElementById('model');
  const generateBtn = document.getElementById('generateBtn');
  const errorEl = document.getElementById('error');
  const dropzone = document.getElementById('dropzone');
  const fileInput = document.getElementById('fileInput');
  const resultEl = document.getElementById('result');
  const statusEl = document.getElementById('status');

  IMAGE_MODELS.forEach(m => {
    const opt = document.createElement('option');
    opt.value = m;
    opt.textContent = m;
    modelEl.appendChild(opt);
  });

  let floor = null;

  // ── Render from server state ──
  function render(state) {
    floor = state;
    errorEl.textContent = state.error || '';
    errorEl.classList.toggle('visible', !!state.error);
    generateBtn.disabled = !state.original_image || state.is_loading;
    generateBtn.textContent = state.is_loading ? 'Generating...' : 'Generate 3D View';
    dropzone.classList.toggle('disabled', state.is_loading);
    fileInput.disabled = state.is_loading;

    if (state.original_image_preview) {
      dropzone.classList.remove('dropzone');
      dropzone.innerHTML = '';
      const img = document.createElement('img');
      img.src = state.original_image_preview;
      img.alt = 'Original 2D floor plan';
      dropzone.appendChild(img);
      dropzone.appendChild(fileInput);
    }

    if (state.is_loading) {
      resultEl.innerHTML = '<div style="text-align:center"><div class="spinner"></div>Visualizing structure...</div>';
    } else if (state.generated_image_preview) {
      resultEl.innerHTML = '';
      const img = document.createElement('img');
      img.src = state.generated_image_preview;
      img.alt = 'Generated 3D floor plan';
      resultEl.appendChild(img);
    } else {
      resultEl.textContent = 'No image available';
    }
  }

  async function callApi(url, options) {
    const res = await fetch(url, options);
    const data = await res.json();
    if (data.floor) render(data.floor);
    if (!res.ok) throw new Error(data.error || 'HTTP ' + res.status);
    return data;
  }

  function showError(message) {
    errorEl.textContent = message;
    errorEl.classList.add('visible');
  }

  // ── Selection ──
  async function selectFile(file) {
    if (!file || (floor && floor.is_loading)) return;
    const form = new FormData();
    form.append('file', file);
    try {
      await callApi('/api/floor/select', { method: 'POST', body: form });
      statusEl.textContent = '';
    } catch (e) {
      showError(e.message);
    }
  }

  fileInput.addEventListener('change', () => {
    if (fileInput.files.length > 0) selectFile(fileInput.files[0]);
  });
  dropzone.addEventListener('dragover', e => { e.preventDefault(); dropzone.classList.add('over'); });
  dropzone.addEventListener('dragleave', () => dropzone.classList.remove('over'));
  dropzone.addEventListener('drop', e => {
    e.preventDefault();
    dropzone.classList.remove('over');
    if (e.dataTransfer.files.length > 0) selectFile(e.dataTransfer.files[0]);
  });

  // ── Generation ──
  async function generate() {
    if (!floor || floor.is_loading) return;
    render({ ...floor, is_loading: true, error: null });
    statusEl.textContent = '';
    try {
      const data = await callApi('/api/floor/generate', {
        method: 'POST',
        headers: { 'Content-Type': 'application/json' },
        body: JSON.stringify({ model: modelEl.value }),
      });
      if (data.elapsed !== undefined) {
        statusEl.innerHTML = 'Completed in <span class="timer">' + data.elapsed + 's</span>';
      }
    } catch (e) {
      showError(e.message);
    }
  }

  callApi('/api/floor').then(render).catch(e => showError(e.message));
</script>
</body>
</html>
"""


if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(debug=True, port=PORT, threaded=True)
