"""领域层模型与协议。

包含：
- models: ChatSettings / ChatRequest / Provider 响应变体 / ChatResult / SendResult。
- message: 可观察的转录消息实体 ChatMessage。
- observable: 字段变更通知基类。
- exceptions: 业务异常类型定义。
"""
