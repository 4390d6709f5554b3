"""QML source for the notes canvas window."""

from __future__ import annotations

NOTES_CANVAS_QML = r"""
import QtQuick 2.15
import QtQuick.Controls 2.15
import QtQuick.Layouts 1.15

ApplicationWindow {
    id: root
    visible: true
    width: 1024
    height: 720
    color: "#0f172a"
    title: workspace.ideaTitle.length > 0 ? workspace.ideaTitle : "Idea Canvas"

    property string errorText: ""
    property real gridSpacing: 32
    property bool animatingReset: false
    property real shownScale: viewport.scale
    property real shownOffsetX: viewport.offsetX
    property real shownOffsetY: viewport.offsetY

    Behavior on shownScale { enabled: root.animatingReset; NumberAnimation { duration: 220; easing.type: Easing.OutCubic } }
    Behavior on shownOffsetX { enabled: root.animatingReset; NumberAnimation { duration: 220; easing.type: Easing.OutCubic } }
    Behavior on shownOffsetY { enabled: root.animatingReset; NumberAnimation { duration: 220; easing.type: Easing.OutCubic } }

    onShownScaleChanged: gridCanvas.requestPaint()
    onShownOffsetXChanged: gridCanvas.requestPaint()
    onShownOffsetYChanged: gridCanvas.requestPaint()

    Timer {
        id: resetAnimationTimer
        interval: 240
        onTriggered: root.animatingReset = false
    }

    function pointsOf(touchPoints) {
        var result = []
        for (var i = 0; i < touchPoints.length; ++i) {
            var p = touchPoints[i]
            result.push({ "id": p.pointId, "x": p.x, "y": p.y })
        }
        return result
    }

    onClosing: workspace.close()
    onWidthChanged: viewport.setViewportSize(canvasArea.width, canvasArea.height)
    onHeightChanged: viewport.setViewportSize(canvasArea.width, canvasArea.height)

    Connections {
        target: workspace
        function onErrorOccurred(message) {
            root.errorText = message
            errorDialog.open()
        }
    }

    Connections {
        target: viewport
        function onResetRequested() {
            root.animatingReset = true
            resetAnimationTimer.restart()
        }
    }

    header: ToolBar {
        RowLayout {
            anchors.fill: parent
            Label {
                text: root.title
                color: "#e2e8f0"
                font.pixelSize: 16
                Layout.leftMargin: 12
                Layout.fillWidth: true
            }
            Label {
                text: noteModel.count + " notes"
                color: "#94a3b8"
            }
            ToolButton {
                text: "Reset view"
                onClicked: viewport.resetView()
            }
            ToolButton {
                text: "New note"
                onClicked: workspace.requestNewNote()
            }
        }
    }

    Item {
        id: canvasArea
        anchors.fill: parent
        clip: true
        Component.onCompleted: viewport.setViewportSize(width, height)

        Canvas {
            id: gridCanvas
            anchors.fill: parent
            onPaint: {
                var ctx = getContext("2d")
                ctx.reset()
                ctx.fillStyle = "#334155"
                var step = root.gridSpacing * root.shownScale
                var startX = root.shownOffsetX % step
                var startY = root.shownOffsetY % step
                for (var x = startX; x < width; x += step) {
                    for (var y = startY; y < height; y += step) {
                        ctx.fillRect(x - 1, y - 1, 2, 2)
                    }
                }
            }
        }

        Item {
            id: noteLayer
            transform: [
                Scale { xScale: root.shownScale; yScale: root.shownScale },
                Translate { x: root.shownOffsetX; y: root.shownOffsetY }
            ]

            Repeater {
                model: noteModel
                delegate: Rectangle {
                    property bool active: model.dragging && gestures.activeNoteId === model.noteId
                    property color noteColor: model.color
                    x: model.noteX + (active ? gestures.dragDeltaX / viewport.scale : 0)
                    y: model.noteY + (active ? gestures.dragDeltaY / viewport.scale : 0)
                    z: model.dragging ? 1 : 0
                    width: noteModel.noteWidth
                    height: Math.max(noteModel.noteHeight, column.implicitHeight + 24)
                    radius: 10
                    color: "#1e293b"
                    border.color: noteColor
                    border.width: model.dragging ? 3 : 2
                    opacity: model.dragging ? 0.85 : 1.0

                    Column {
                        id: column
                        anchors.fill: parent
                        anchors.margins: 12
                        spacing: 6
                        Label {
                            text: model.categoryLabel
                            color: noteColor
                            font.pixelSize: 11
                            font.bold: true
                        }
                        Label {
                            width: parent.width
                            text: model.title
                            color: "#f8fafc"
                            font.pixelSize: 15
                            wrapMode: Text.WordWrap
                        }
                        Label {
                            width: parent.width
                            text: model.content
                            color: "#cbd5e1"
                            font.pixelSize: 12
                            wrapMode: Text.WordWrap
                            maximumLineCount: 4
                            elide: Text.ElideRight
                        }
                    }
                }
            }
        }

        MultiPointTouchArea {
            anchors.fill: parent
            mouseEnabled: true
            minimumTouchPoints: 1
            maximumTouchPoints: 5
            onPressed: gestures.touchPressed(root.pointsOf(touchPoints), Date.now())
            onUpdated: gestures.touchMoved(root.pointsOf(touchPoints), Date.now())
            onReleased: gestures.touchReleased(root.pointsOf(touchPoints), Date.now())
            onCanceled: gestures.touchCancelled()
        }

        WheelHandler {
            target: null
            onWheel: function(event) {
                var factor = event.angleDelta.y > 0 ? 1.1 : 1 / 1.1
                viewport.zoomBy(factor, point.position.x, point.position.y)
            }
        }
    }

    Popup {
        id: editorPopup
        visible: noteEditor.isOpen
        modal: true
        closePolicy: Popup.NoAutoClose
        anchors.centerIn: parent
        width: Math.min(root.width - 40, 420)
        padding: 16

        ColumnLayout {
            anchors.fill: parent
            spacing: 10

            Label {
                text: noteEditor.isNew ? "New note" : "Edit note"
                font.pixelSize: 18
            }
            TextField {
                Layout.fillWidth: true
                placeholderText: "Title"
                text: noteEditor.title
                onTextEdited: noteEditor.title = text
            }
            ComboBox {
                id: categoryBox
                Layout.fillWidth: true
                model: noteEditor.categoryOptions()
                textRole: "label"
                valueRole: "value"
                currentIndex: indexOfValue(noteEditor.category)
                onActivated: noteEditor.category = currentValue
            }
            ComboBox {
                Layout.fillWidth: true
                visible: noteEditor.category === "feature"
                model: ["low", "medium", "high", "critical"]
                currentIndex: Math.max(0, find(noteEditor.featurePriority))
                onActivated: noteEditor.featurePriority = currentText
            }
            ComboBox {
                Layout.fillWidth: true
                visible: noteEditor.category === "todo"
                model: ["low", "medium", "high"]
                currentIndex: Math.max(0, find(noteEditor.todoPriority))
                onActivated: noteEditor.todoPriority = currentText
            }
            ColumnLayout {
                Layout.fillWidth: true
                visible: noteEditor.category === "question"
                ComboBox {
                    Layout.fillWidth: true
                    model: ["low", "medium", "high"]
                    currentIndex: Math.max(0, find(noteEditor.questionUrgency))
                    onActivated: noteEditor.questionUrgency = currentText
                }
                CheckBox {
                    text: "Blocking"
                    checked: noteEditor.questionBlocking
                    onToggled: noteEditor.questionBlocking = checked
                }
                TextField {
                    Layout.fillWidth: true
                    placeholderText: "Who to ask"
                    text: noteEditor.questionWhoToAsk
                    onTextEdited: noteEditor.questionWhoToAsk = text
                }
            }
            TextArea {
                Layout.fillWidth: true
                Layout.preferredHeight: 120
                placeholderText: "Details"
                wrapMode: TextEdit.Wrap
                text: noteEditor.content
                onTextChanged: if (activeFocus) noteEditor.content = text
            }
            RowLayout {
                Layout.fillWidth: true
                Button {
                    text: "Delete"
                    visible: !noteEditor.isNew
                    onClicked: noteEditor.deleteNote()
                }
                Item { Layout.fillWidth: true }
                Button {
                    text: "Cancel"
                    onClicked: noteEditor.cancel()
                }
                Button {
                    text: "Save"
                    highlighted: true
                    onClicked: noteEditor.save()
                }
            }
        }
    }

    Dialog {
        id: errorDialog
        title: "Error"
        modal: true
        anchors.centerIn: parent
        standardButtons: Dialog.Ok
        Label { text: root.errorText }
    }
}
"""

__all__ = ["NOTES_CANVAS_QML"]
